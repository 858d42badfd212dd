# src/semiprimefinder/fmt.py
from __future__ import annotations

import re
from collections.abc import Iterable

from colorama import Fore, Style

from semiprimefinder.sequence import Sequence

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def format_factors(factors: Iterable[int]) -> str:
    """Turn (2, 2, 3) into '2 × 2 × 3'."""
    parts = [str(p) for p in factors]
    return " × ".join(parts) if parts else "1"


def format_semiprime(target: int, seq: Sequence, *, color: bool = False) -> str:
    """'11 = 2 × 5 + 1' style line for one record."""
    op = "+" if seq.sign > 0 else "-"
    lhs = f"{Fore.GREEN}{target}{Style.RESET_ALL}" if color else str(target)
    return f"{lhs} = {format_factors(seq.factors)} {op} 1"


def format_prime_table(primes: Iterable[int], per_line: int = 12) -> list[str]:
    """
    Right-aligned table of primes, `per_line` entries per row.
    Column width follows the largest prime.
    """
    ps = list(primes)
    if not ps:
        return []
    per_line = max(1, per_line)
    width = len(str(ps[-1]))
    lines: list[str] = []
    for i in range(0, len(ps), per_line):
        row = ps[i:i + per_line]
        lines.append(", ".join(f"{p:>{width}}" for p in row))
    return lines


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm (and hh:mm:ss.mmm if ≥1h)."""
    MAX_SECONDS = 60
    if seconds < 1:
        ms = round(seconds * 1000)
        return f"{ms} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    if m < MAX_SECONDS:
        return f"{int(m)}:{s:06.3f}"               # mm:ss.mmm
    h, m = divmod(int(m), MAX_SECONDS)
    return f"{h}:{m:02d}:{s:06.3f}"                # hh:mm:ss.mmm
