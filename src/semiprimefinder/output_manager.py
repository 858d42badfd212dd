# output_manager.py

from __future__ import annotations

import csv
import os
from collections.abc import Iterable
from pathlib import Path

from semiprimefinder.fmt import strip_ansi
from semiprimefinder.utility import debug, warn
from semiprimefinder.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str | Path) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)

    if os.path.isabs(path):
        return os.path.normpath(path)

    return os.path.normpath(os.path.join(str(workspace_root), path))


class OutputManager:
    """
    Handles all printing/output, to screen and to report files.

    Usage:
        om = OutputManager(output_dir="results/")
        om.write("Hello")                              # screen (unless quiet)
        om.write_lines("100_missingPrimes.txt", lines) # file in results/
        om.write_csv("100_eval.csv", rows)

    Report writes never raise on I/O failure: the problem is reported with a
    warning, remembered in `failures`, and the caller carries on.
    """

    def __init__(self, output_dir: str | None = None, quiet: bool = False):
        """
        Parameters:
            output_dir:
                None or "" => screen only, report files are skipped
                relative   => below the workspace folder
                absolute   => used as-is
            quiet: if True, no output to screen
        """
        self.quiet = quiet
        self.output_dir: str | None = None
        self.written: list[str] = []
        self.failures: list[tuple[str, str]] = []

        if output_dir:
            self.output_dir = resolve_output_path(output_dir, workspace_dir())

    # --- screen --------------------------------------------------------------

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen unless quiet."""
        text = sep.join(str(a) for a in args) + end
        if not self.quiet:
            print(text, end="")

    # --- files -----------------------------------------------------------------

    def path_for(self, filename: str) -> str | None:
        if not self.output_dir:
            return None
        return os.path.join(self.output_dir, filename)

    def _prepare(self, filename: str) -> str | None:
        path = self.path_for(filename)
        if path is None:
            debug(f"no output directory, skipping {filename}")
            return None
        os.makedirs(self.output_dir, exist_ok=True)
        return path

    def _failed(self, path: str, e: OSError) -> None:
        self.failures.append((path, f"{type(e).__name__}: {e}"))
        warn(f"Could not write output file: {path} ({type(e).__name__}: {e})")

    def write_lines(self, filename: str, lines: Iterable[object]) -> str | None:
        """Write one line per item. Returns the path, or None if skipped/failed."""
        try:
            path = self._prepare(filename)
            if path is None:
                return None
            with open(path, "w", encoding="utf-8") as fh:
                for line in lines:
                    fh.write(strip_ansi(str(line)) + "\n")
        except OSError as e:
            self._failed(self.path_for(filename) or filename, e)
            return None
        self.written.append(path)
        debug(f"wrote {path}")
        return path

    def write_csv(self, filename: str, rows: Iterable[Iterable[object]]) -> str | None:
        """Write rows with the csv module. Returns the path, or None if skipped/failed."""
        try:
            path = self._prepare(filename)
            if path is None:
                return None
            with open(path, "w", encoding="utf-8", newline="") as fh:
                csv.writer(fh).writerows(rows)
        except OSError as e:
            self._failed(self.path_for(filename) or filename, e)
            return None
        self.written.append(path)
        debug(f"wrote {path}")
        return path
