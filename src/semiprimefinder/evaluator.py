# -----------------------------------------------------------------------------
#  evaluator.py
#  Reports built from a finished search: CSV, allowed ranking, statistics
# -----------------------------------------------------------------------------

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from semiprimefinder.endings import MIN_CONSECUTIVE_ENDINGS, find_consecutive_endings
from semiprimefinder.finder import OVERWRITE, SemiprimeFinder, verify_semiprimes
from semiprimefinder.fmt import format_duration
from semiprimefinder.output_manager import OutputManager
from semiprimefinder.sequence import Sequence
from semiprimefinder.utility import InvalidArgumentError, debug, error

CSV_HEADER = ["Prime", "Sign", "Allowed?", "FactorCount", "Factors"]

# Targets that count as allowed without a factorization
ALLOWED_SEEDS = (2, 3)


@dataclass
class Evaluation:
    size: int
    semiprimes: dict[int, Sequence]
    primes: list[int]
    collisions: int = 0
    seconds: float = 0.0
    written: list[str] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)
    invalid: list[int] = field(default_factory=list)   # filled by verify

    @property
    def missing(self) -> list[int]:
        return find_missing_primes(self.primes, self.semiprimes)


# ---------- Analysis -----------------------------------------------------------

def allowed_targets(semiprimes: Mapping[int, Sequence]) -> dict[int, bool]:
    """
    A semiprime is allowed when every one of its factors is 2, 3 or an
    allowed semiprime. Factors are always smaller than the target, so one
    pass in ascending order settles everything.
    """
    allowed: dict[int, bool] = {p: True for p in ALLOWED_SEEDS}
    for target in sorted(semiprimes):
        allowed[target] = all(allowed.get(f, False) for f in semiprimes[target].factors)
    return allowed


def max_sequence_length(semiprimes: Mapping[int, Sequence]) -> int:
    return max((seq.k for seq in semiprimes.values()), default=0)


def find_missing_primes(primes: Iterable[int], semiprimes: Mapping[int, Sequence]) -> list[int]:
    """Primes for which no semiprime combination was found."""
    return [p for p in primes if p not in semiprimes]


def factor_occurrences(semiprimes: Mapping[int, Sequence]) -> dict[int, int]:
    """How many times each prime is used as a factor, by ascending factor."""
    counts = Counter(f for seq in semiprimes.values() for f in seq.factors)
    return dict(sorted(counts.items()))


def last_digit_counts(semiprimes: Mapping[int, Sequence]) -> list[int]:
    """How often each last digit 0-9 occurs among all factors."""
    digits = [0] * 10
    for seq in semiprimes.values():
        for f in seq.factors:
            digits[f % 10] += 1
    return digits


# ---------- Report rows --------------------------------------------------------

def prepare_csv_rows(primes: Iterable[int], semiprimes: Mapping[int, Sequence]) -> list[list[object]]:
    """
    One row per prime:

        Prime, Sign, Allowed?, FactorCount, factor_1, ..., factor_k

    Rows are padded with empty cells to the longest factor tuple so every
    row has the same width. Primes without a combination get sign 0,
    allowed 0 and factor count 0.
    """
    # at least one Factors column, even when nothing was found
    width = max(1, max_sequence_length(semiprimes))
    allowed = allowed_targets(semiprimes)

    rows: list[list[object]] = [CSV_HEADER + [""] * (width - 1)]
    for p in primes:
        seq = semiprimes.get(p)
        if seq is None:
            rows.append([p, 0, 0, 0] + [""] * width)
            continue
        flag = 1 if allowed.get(p, False) else 0
        rows.append([p, seq.sign, flag, seq.k, *seq.factors] + [""] * (width - seq.k))
    return rows


def endings_lines(primes: Iterable[int], min_run: int = MIN_CONSECUTIVE_ENDINGS) -> list[str]:
    lines: list[str] = []
    for length, runs in find_consecutive_endings(primes, min_run).items():
        lines.append(f"{length}\t{len(runs)}")
        lines.extend(f"\t{' '.join(str(p) for p in run)}" for run in runs)
    return lines


# ---------- Evaluation ---------------------------------------------------------

def conduct_evaluation(  # noqa: PLR0913
    size: int,
    *,
    om: OutputManager | None = None,
    policy: str = OVERWRITE,
    write_csv: bool = True,
    write_missing: bool = False,
    write_factor_count: bool = False,
    write_digit_count: bool = False,
    write_endings: bool = False,
    min_run: int = MIN_CONSECUTIVE_ENDINGS,
    verify: bool = False,
    progress: bool = False,
) -> Evaluation:
    """
    Run one search of [2, size] and write the enabled reports into the
    output manager's directory. Failed writes are warned about and listed
    in `Evaluation.failures`; they never abort the evaluation.
    """
    om = om or OutputManager(output_dir=None, quiet=True)
    t0 = time.perf_counter()

    finder = SemiprimeFinder(size, policy=policy, progress=progress)
    semiprimes = finder.run()
    primes = finder.primes()

    ev = Evaluation(
        size=size,
        semiprimes=semiprimes,
        primes=primes,
        collisions=finder.collisions,
    )
    debug(f"size {size}: {len(primes)} primes, {len(semiprimes)} semiprimes")

    if verify:
        ev.invalid = verify_semiprimes(semiprimes, size)

    before_written = len(om.written)
    before_failed = len(om.failures)

    if write_csv:
        om.write_csv(f"{size}_eval.csv", prepare_csv_rows(primes, semiprimes))
    if write_missing:
        om.write_lines(f"{size}_missingPrimes.txt", ev.missing)
    if write_factor_count:
        om.write_lines(f"{size}_factorCount.txt", (f"{f}\t{c}" for f, c in factor_occurrences(semiprimes).items()))
    if write_digit_count:
        om.write_lines(f"{size}_digitCount.txt", (f"{d}\t{c}" for d, c in enumerate(last_digit_counts(semiprimes))))
    if write_endings:
        om.write_lines(f"{size}_endings.txt", endings_lines(primes, min_run))

    ev.written = om.written[before_written:]
    ev.failures = om.failures[before_failed:]
    ev.seconds = time.perf_counter() - t0
    debug(f"size {size}: done in {format_duration(ev.seconds)}")
    return ev


def evaluate_sizes(sizes: Iterable[int], **kwargs) -> tuple[list[Evaluation], list[tuple[int, str]]]:
    """
    Evaluate several sizes one after the other, each with fresh state.
    A size that fails validation is reported and skipped; the batch goes on.

    Returns (evaluations, [(size, message), ...] for the sizes that failed).
    """
    done: list[Evaluation] = []
    failed: list[tuple[int, str]] = []
    for size in sizes:
        try:
            done.append(conduct_evaluation(size, **kwargs))
        except InvalidArgumentError as e:
            error(f"size {size}: {e}")
            failed.append((size, str(e)))
    return done, failed
