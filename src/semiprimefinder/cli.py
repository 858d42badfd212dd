# src/semiprimefinder/cli.py

"""
Semiprime Finder - primes next to products of primes

Description:
    For every size N, builds all products of two or more primes up to N and
    records which of product-1 / product+1 are prime, together with the
    factors. Writes a CSV report per size (plus optional statistics) into
    the workspace results folder.

usage: see semiprimefinder -h
"""

from __future__ import annotations

import argparse
import os
import sys
import textwrap
from importlib.resources import files as pkg_files

from colorama import Fore, Style, just_fix_windows_console

from semiprimefinder import __version__ as _ver
from semiprimefinder import config as CONFIG
from semiprimefinder.endings import find_consecutive_endings, longest_runs
from semiprimefinder.evaluator import Evaluation, evaluate_sizes
from semiprimefinder.finder import COLLISION_POLICIES, OVERWRITE
from semiprimefinder.fmt import format_duration, format_prime_table, format_semiprime
from semiprimefinder.output_manager import OutputManager
from semiprimefinder.runtime import APPLY, CFG, ensure_runtime_deps
from semiprimefinder.runtime import current as _rt_current
from semiprimefinder.sieve import build_sieve
from semiprimefinder.utility import (
    UserInputError,
    debug,
    error,
    flatten_dotted,
    parse_size,
    typename,
    validate_output_setting,
)
from semiprimefinder.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

COMMANDS = {"init", "where", "profiles", "active", "primes", "endings"}


def _resolve_inputs(items: list[str]) -> tuple[str | None, list[int]]:
    """Return (profile_or_command, sizes) from the positionals.

    Rules:
      - a leading non-numeric item is a command or a profile name
      - every remaining item must be a size
    """
    if not items:
        return None, []

    head: str | None = None
    rest = items
    if parse_size(items[0]) is None:
        head, rest = items[0], items[1:]

    sizes: list[int] = []
    for item in rest:
        if head == "init" and item == "overwrite":
            continue
        n = parse_size(item)
        if n is None:
            raise UserInputError(f"Invalid input: '{item}' is not a size.")
        sizes.append(n)
    return head, sizes


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create workspace folders and copy packaged profiles if missing.

      init overwrite
          Meant for developers. Requires environment variable SEMIPRIMEFINDER_DEV=1.
          Replaces the workspace profiles with the packaged ones.

      profiles
          List all available profiles.

      active
          Show the last used profile.

      where
          Show the workspace and package paths.

      primes N
          Print all primes up to N as a table.

      endings N
          Show runs of consecutive primes up to N with the same last digit.
    """)

    p = argparse.ArgumentParser(
        prog="semiprimefinder",
        description="Semiprime Finder — primes next to products of primes",
        usage=(
            "semiprimefinder [[profile] [size ...]] [--output DIR] [--policy POLICY]\n"
            "                       [--print] [--verify] [--quiet] [--debug]\n"
            "       semiprimefinder init | where | profiles | active\n"
            "       semiprimefinder primes N | endings N\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[[profile] size ...]",
                   help="optional profile name (or command) followed by sizes to evaluate")
    p.add_argument("--output", default=None, help="Directory for report files (overrides OUTPUT.OUTPUT_DIR)")
    p.add_argument("--policy", choices=COLLISION_POLICIES, default=None,
                   help="Collision policy for targets reached twice (overrides SEARCH.COLLISION_POLICY)")
    p.add_argument("--print", dest="show", action="store_true", help="Print every semiprime with its factors")
    p.add_argument("--verify", action="store_true", help="Cross-check every record with sympy")
    p.add_argument("--quiet", action="store_true", help="Suppress progress and summary output")
    p.add_argument("--debug", action="store_true", help="Show internal trace info and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug_flag = "--debug" in (argv if argv is not None else sys.argv)
        if debug_flag:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


# ---- commands ----
def _run_command(command: str, sizes: list[int], args, om: OutputManager) -> int:
    if command == "init":
        if "overwrite" in args.items[1:]:
            if os.environ.get("SEMIPRIMEFINDER_DEV") != "1":
                om.write("Refusing to overwrite: set SEMIPRIMEFINDER_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True)
            om.write(f"Workspace ready at: {ws} (overwrote existing files)")
        else:
            ws, _, copied = ensure_workspace_seeded()
            om.write(f"Workspace ready at: {ws}")
        om.write(f"Copied -> profiles: {copied.get('profiles', 0)}")
        return 0

    if command == "where":
        om.write(f"Workspace: {workspace_dir()}")
        om.write(f"Package:   {pkg_files('semiprimefinder')}")
        return 0

    if command == "profiles":
        for name, desc in CONFIG.list_profiles_with_descriptions():
            om.write(f"{Fore.CYAN}{name:<16}{Style.RESET_ALL} {desc}")
        return 0

    if command == "active":
        om.write(f"Active profile: {CONFIG.read_current_profile() or 'default'}")
        return 0

    # primes / endings need exactly one size
    if len(sizes) != 1:
        raise UserInputError(f"Invalid input: '{command}' needs exactly one size, e.g. '{command} 1000'.")
    sieve = build_sieve(sizes[0])

    if command == "primes":
        for line in format_prime_table(sieve.primes(), int(CFG("OUTPUT.PRIMES_PER_LINE", 12))):
            om.write(line)
        om.write(f"{sieve.count()} primes up to {sieve.size}")
        return 0

    # endings
    min_run = int(CFG("EVALUATION.MIN_CONSECUTIVE_ENDINGS", 3))
    runs = find_consecutive_endings(sieve.primes(), min_run)
    for length, found in runs.items():
        om.write(f"{Fore.YELLOW}{length}{Style.RESET_ALL} in a row: {len(found)} run(s)")
    for run in longest_runs(runs):
        om.write(f"  longest: {', '.join(str(p) for p in run)}")
    return 0


def _load_profile(name: str, explicit: bool, *, debug_flag: bool = False) -> None:
    """Load & apply a profile; remember it when it was chosen explicitly."""
    if not CONFIG.has_profile(name):
        if explicit:
            avail = ", ".join(CONFIG.list_all_profiles())
            raise UserInputError(f"Unknown profile: '{name}'. Available profiles: {avail}")
        name = "default"
    if not CONFIG.has_profile(name):
        debug("no default profile in workspace, using built-in defaults")
        return

    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if debug_flag:
        _rt_current().debug = True
    if explicit:
        CONFIG.write_current_profile(name)

    debug(f"active profile: {selected.name}")
    if selected._source:
        debug(f"profile file: {selected._source}")
    for k, v in sorted(flatten_dotted(selected.as_dict()).items(), key=lambda kv: kv[0].lower()):
        debug(f"        {k:.<44} {v!r} ({typename(v)})")


def _report(ev: Evaluation, om: OutputManager, *, show: bool) -> None:
    om.write(
        f"{Fore.YELLOW}{Style.BRIGHT}{ev.size}{Style.RESET_ALL}: "
        f"{len(ev.semiprimes)} semiprimes among {len(ev.primes)} primes, "
        f"{len(ev.missing)} primes without combination, "
        f"{ev.collisions} collision(s) ({format_duration(ev.seconds)})"
    )
    if show:
        for target in sorted(ev.semiprimes):
            om.write("  " + format_semiprime(target, ev.semiprimes[target], color=True))
    for path in ev.written:
        om.write(f"  wrote {path}")
    if ev.invalid:
        error(f"size {ev.size}: {len(ev.invalid)} record(s) failed verification: {ev.invalid[:10]}")


# ---- main ----
def _main_impl(argv=None) -> int:

    just_fix_windows_console()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    if not ensure_runtime_deps(strict=True):
        return 1

    ensure_workspace_seeded()

    head, cli_sizes = _resolve_inputs(args.items)
    command = head if head in COMMANDS else None
    profile = None if command else head

    # Choose profile: explicit → last-used → default
    profile_name = profile or CONFIG.read_current_profile() or "default"
    _load_profile(profile_name, explicit=profile is not None, debug_flag=bool(args.debug))
    if args.debug:
        rt.debug = True
    if args.quiet:
        rt.progress = False

    try:
        output_dir = validate_output_setting(args.output)
    except ValueError as e:
        raise UserInputError(f"--output: {e}") from None
    if output_dir is None:
        output_dir = CFG("OUTPUT.OUTPUT_DIR", "results/")

    om = OutputManager(output_dir=output_dir, quiet=args.quiet)

    if command:
        return _run_command(command, cli_sizes, args, om)

    sizes = cli_sizes or list(CFG("SEARCH.SIZES", []) or [])
    if not sizes:
        raise UserInputError("Invalid input: no sizes given and the profile has no SEARCH.SIZES.")

    policy = args.policy or CFG("SEARCH.COLLISION_POLICY", OVERWRITE)
    verify = args.verify or bool(CFG("BEHAVIOUR.VERIFY", False))

    if not args.quiet:
        print(f"{Fore.YELLOW}{Style.BRIGHT}Semiprime Finder v{_ver}{Style.RESET_ALL} — profile {rt.profile_name}, policy {policy}")

    evaluations, failed = evaluate_sizes(
        sizes,
        om=om,
        policy=policy,
        write_csv=bool(CFG("EVALUATION.WRITE_CSV", True)),
        write_missing=bool(CFG("EVALUATION.WRITE_MISSING_PRIMES", False)),
        write_factor_count=bool(CFG("EVALUATION.WRITE_FACTOR_COUNT", False)),
        write_digit_count=bool(CFG("EVALUATION.WRITE_DIGIT_COUNT", False)),
        write_endings=bool(CFG("EVALUATION.WRITE_ENDINGS", False)),
        min_run=int(CFG("EVALUATION.MIN_CONSECUTIVE_ENDINGS", 3)),
        verify=verify,
        progress=rt.progress,
    )

    for ev in evaluations:
        _report(ev, om, show=args.show)

    bad = bool(failed) or any(ev.invalid for ev in evaluations)
    return 1 if bad else 0


if __name__ == "__main__":
    raise SystemExit(main())
