from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("semiprimefinder")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .finder import SemiprimeFinder, find_semiprimes, verify_semiprimes
from .runtime import APPLY, CFG
from .sequence import Sequence
from .sieve import NO_PRIME, PrimeSieve, build_sieve
from .utility import InvalidArgumentError, UserInputError
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "NO_PRIME",
    "InvalidArgumentError",
    "PrimeSieve",
    "SemiprimeFinder",
    "Sequence",
    "UserInputError",
    "__version__",
    "build_sieve",
    "find_semiprimes",
    "has_profile",
    "load_settings",
    "read_current_profile",
    "verify_semiprimes",
    "workspace_dir"
]
