# -----------------------------------------------------------------------------
#  endings.py
#  Runs of consecutive primes that share their last decimal digit
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterable

from semiprimefinder.utility import InvalidArgumentError

MIN_CONSECUTIVE_ENDINGS = 3


def find_consecutive_endings(primes: Iterable[int], min_run: int = MIN_CONSECUTIVE_ENDINGS) -> dict[int, list[list[int]]]:
    """
    Split an ascending list of primes into maximal runs with the same last
    digit and keep the runs of at least `min_run` primes.

    Returns {run_length: [run, run, ...]} with runs in list order.

    >>> find_consecutive_endings([139, 149, 151, 181, 191, 193], min_run=2)
    {2: [[139, 149]], 3: [[151, 181, 191]]}
    """
    if min_run < 1:
        raise InvalidArgumentError(f"min_run must be >= 1, got {min_run}")

    runs: dict[int, list[list[int]]] = {}
    current: list[int] = []
    last_digit = None

    for p in primes:
        digit = p % 10
        if digit != last_digit and current:
            _save_run(current, runs, min_run)
            current = []
        current.append(p)
        last_digit = digit
    if current:
        _save_run(current, runs, min_run)
    return dict(sorted(runs.items()))


def _save_run(run: list[int], runs: dict[int, list[list[int]]], min_run: int) -> None:
    if len(run) >= min_run:
        runs.setdefault(len(run), []).append(list(run))


def longest_runs(runs: dict[int, list[list[int]]], top: int = 1) -> list[list[int]]:
    """The runs of the `top` largest lengths, longest first."""
    out: list[list[int]] = []
    for length in sorted(runs, reverse=True)[:max(0, top)]:
        out.extend(runs[length])
    return out
