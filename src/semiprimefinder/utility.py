# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import sys

from colorama import Fore, Style

from semiprimefinder.runtime import current as _rt_current


class UserInputError(Exception):
    pass


class InvalidArgumentError(UserInputError, ValueError):
    """Bad size, policy or run length passed to the core. Fatal to that run."""


# --- Diagnostics (stderr) ----------------------------------------------------

def debug(msg: str) -> None:
    """Print a [debug] line to stderr, only when the runtime debug flag is on."""
    if not _rt_current().debug:
        return
    print(f"{Fore.CYAN}[debug]{Style.RESET_ALL} {msg}", file=sys.stderr)


def warn(msg: str) -> None:
    print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {msg}", file=sys.stderr)


def error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


# --- Input parsing -----------------------------------------------------------

def check_size(size: object, label: str = "size") -> int:
    """
    Validate an upper bound N for a sieve or a search.
    Rejects bools, non-integers and negative values.
    """
    if isinstance(size, bool) or not isinstance(size, int):
        raise InvalidArgumentError(f"{label} must be an integer, got {typename(size)}")
    if size < 0:
        raise InvalidArgumentError(f"{label} must be >= 0, got {size}")
    return size


def parse_size(text: str) -> int | None:
    """
    Parse a size typed on the command line.

    Accepts plain integers with optional '_' or ',' grouping and the
    scientific shorthand '1e6'. Returns None when `text` is not numeric
    (so the caller can treat it as a profile or command), and raises
    UserInputError for numeric input that is not a usable size.

    >>> parse_size("10_000")
    10000
    >>> parse_size("2e5")
    200000
    """
    s = text.strip().replace("_", "").replace(",", "")
    if not s:
        return None
    low = s.lower()
    if "e" in low:
        mant, _, exp = low.partition("e")
        if not (mant.isdigit() and exp.isdigit()):
            return None
        return int(mant) * 10 ** int(exp)
    if s.lstrip("+-").isdigit():
        n = int(s)
        if n < 0:
            raise UserInputError(f"Invalid input: size must be >= 0, got {n}.")
        return n
    return None


def validate_output_setting(output: str | None) -> str | None:
    """
    Validate the output directory setting.
    - None / "" => ok (profile decides)
    - an existing regular file is refused; reports go into a directory
    Returns the (possibly normalized) directory, or raises ValueError.
    """
    FORBIDDEN_EXTENSIONS = {".py", ".md", ".toml"}

    if not output:
        return output

    path = os.path.expanduser(output)
    if os.path.isfile(path):
        raise ValueError(f"Output must be a directory, not a file: {output}")

    ext = os.path.splitext(path.rstrip("/\\"))[1].lower()
    if ext in FORBIDDEN_EXTENSIONS:
        raise ValueError(f"Forbidden output directory suffix: {ext}")

    return output


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
