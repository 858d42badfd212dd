# tests/test_evaluator.py
"""
Tests for the reporting layer: allowed ranking, CSV rows, statistics and
the per-size evaluation with its log-and-continue file handling.

Run: pytest -v
"""

from __future__ import annotations

import csv

import pytest

from semiprimefinder.evaluator import (
    CSV_HEADER,
    allowed_targets,
    conduct_evaluation,
    endings_lines,
    evaluate_sizes,
    factor_occurrences,
    find_missing_primes,
    last_digit_counts,
    max_sequence_length,
    prepare_csv_rows,
)
from semiprimefinder.finder import find_semiprimes
from semiprimefinder.output_manager import OutputManager
from semiprimefinder.sequence import Sequence

# ---------- fixtures ----------------------------------------------------------


@pytest.fixture
def ten():
    """Result of the size-10 search: {3: -1·(2,2), 5: -1·(2,3), 7: -1·(2,2,2)}."""
    return find_semiprimes(10)


def _read_csv(path):
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh))


# ---------- analysis ----------------------------------------------------------


def test_allowed_seeds_and_small_targets(ten):
    allowed = allowed_targets(ten)
    assert allowed == {2: True, 3: True, 5: True, 7: True}


def test_allowed_requires_every_factor_allowed():
    semis = {
        5: Sequence(-1, (2, 3)),
        11: Sequence(1, (2, 5)),
        13: Sequence(1, (2, 2, 3)),
        29: Sequence(1, (2, 2, 7)),
    }
    allowed = allowed_targets(semis)
    assert allowed[11] is True      # 5 is allowed
    assert allowed[13] is True
    assert allowed[29] is False     # 7 has no record


def test_allowed_chain_breaks_on_missing_link():
    semis = {
        11: Sequence(1, (2, 5)),    # 5 missing → not allowed
        23: Sequence(1, (2, 11)),   # depends on 11
    }
    allowed = allowed_targets(semis)
    assert allowed[11] is False
    assert allowed[23] is False


def test_statistics(ten):
    assert max_sequence_length(ten) == 3
    assert max_sequence_length({}) == 0
    assert find_missing_primes([2, 3, 5, 7], ten) == [2]
    assert factor_occurrences(ten) == {2: 6, 3: 1}
    digits = last_digit_counts(ten)
    assert len(digits) == 10
    assert digits[2] == 6
    assert digits[3] == 1
    assert sum(digits) == 7


def test_csv_rows_are_padded_to_same_width(ten):
    rows = prepare_csv_rows([2, 3, 5, 7], ten)
    assert rows[0] == CSV_HEADER + ["", ""]
    assert rows[1:] == [
        [2, 0, 0, 0, "", "", ""],
        [3, -1, 1, 2, 2, 2, ""],
        [5, -1, 1, 2, 2, 3, ""],
        [7, -1, 1, 3, 2, 2, 2],
    ]
    assert len({len(r) for r in rows}) == 1


def test_csv_rows_without_semiprimes_keep_header_width():
    rows = prepare_csv_rows([2], {})
    assert rows == [CSV_HEADER, [2, 0, 0, 0, ""]]


def test_csv_rows_mark_disallowed():
    semis = {11: Sequence(1, (2, 5))}
    rows = prepare_csv_rows([11], semis)
    assert rows[1] == [11, 1, 0, 2, 2, 5]


def test_endings_lines():
    lines = endings_lines([139, 149, 151, 181, 191, 193], min_run=2)
    assert lines == ["2\t1", "\t139 149", "3\t1", "\t151 181 191"]


# ---------- conduct_evaluation ------------------------------------------------


def test_conduct_evaluation_writes_reports(tmp_path):
    om = OutputManager(output_dir=str(tmp_path / "out"), quiet=True)
    ev = conduct_evaluation(
        100,
        om=om,
        write_missing=True,
        write_factor_count=True,
        write_digit_count=True,
        write_endings=True,
        verify=True,
    )

    names = sorted(p.name for p in (tmp_path / "out").iterdir())
    assert names == [
        "100_digitCount.txt",
        "100_endings.txt",
        "100_eval.csv",
        "100_factorCount.txt",
        "100_missingPrimes.txt",
    ]
    assert len(ev.written) == 5
    assert ev.failures == []
    assert ev.invalid == []
    assert ev.semiprimes == find_semiprimes(100)
    assert len(ev.primes) == 25

    rows = _read_csv(tmp_path / "out" / "100_eval.csv")
    assert rows[0][:5] == CSV_HEADER
    assert [int(r[0]) for r in rows[1:]] == ev.primes

    missing = (tmp_path / "out" / "100_missingPrimes.txt").read_text(encoding="utf-8").split()
    assert [int(m) for m in missing] == ev.missing

    digit_lines = (tmp_path / "out" / "100_digitCount.txt").read_text(encoding="utf-8").splitlines()
    assert len(digit_lines) == 10
    assert digit_lines[0] == "0\t0"


def test_conduct_evaluation_without_output_dir_writes_nothing():
    ev = conduct_evaluation(50)
    assert ev.written == []
    assert ev.failures == []
    assert ev.semiprimes == find_semiprimes(50)


def test_failed_write_is_logged_and_evaluation_continues(tmp_path, capsys):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    om = OutputManager(output_dir=str(blocker / "sub"), quiet=True)

    ev = conduct_evaluation(30, om=om, write_missing=True)

    assert ev.written == []
    assert len(ev.failures) == 2
    assert ev.semiprimes == find_semiprimes(30)
    assert "Could not write output file" in capsys.readouterr().err


def test_evaluate_sizes_skips_invalid_size(capsys):
    done, failed = evaluate_sizes([10, -5, 20])
    assert [ev.size for ev in done] == [10, 20]
    assert [size for size, _ in failed] == [-5]
    assert "size -5" in capsys.readouterr().err


def test_evaluate_sizes_uses_fresh_state():
    done, _ = evaluate_sizes([10, 10])
    assert done[0].semiprimes == done[1].semiprimes
    assert done[0].semiprimes is not done[1].semiprimes
