#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  BALLISTIC RANGE TABLE GENERATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Reads Data/{vehicle}.txt projectile files and writes one range table per
  shell to {output}/{vehicle}/{shell}.txt:

      distance<TAB>time of flight<TAB>penetration

  Usage:
    python main.py -i Data -o Ballistic                 # all vehicles
    python main.py -i Data -o Ballistic -s 0.35 -j 8    # finer sweep, 8 threads
    python main.py -i Data -o Ballistic --vehicle ussr_t_34_1941
    python main.py -i Data -o Ballistic --validate expected/ballistic
    python main.py -i Data -o Ballistic --plot ussr_t_34_1941/br_350a
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import logging
import sys
import time

from fcsballistics.atmosphere import DensityTable
from fcsballistics.batch import BatchConfig, DEFAULT_SENSITIVITY, run_batch
from fcsballistics.data_file import parse_data_file
from fcsballistics.range_table import build_range_table
from fcsballistics.validation import validate_directory


logger = logging.getLogger("fcsballistics")


RULE = '─' * 60


def section(title):
    print(f"\n{RULE}\n  {title}\n{RULE}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Generate ballistic range tables for vehicle projectiles.")
    parser.add_argument("-i", "--input", required=True,
                        help="directory of Data/{vehicle}.txt files")
    parser.add_argument("-o", "--output", required=True,
                        help="directory to write {vehicle}/{shell}.txt tables into")
    parser.add_argument("-s", "--sensitivity", type=float, default=DEFAULT_SENSITIVITY,
                        help="sweep sensitivity, 0 < s <= 1 (default: %(default)s)")
    parser.add_argument("-j", "--jobs", type=int, default=0,
                        help="worker threads, 0 = one per CPU (default: %(default)s)")
    parser.add_argument("--vehicle", action="append", default=None,
                        help="only process this vehicle (repeatable)")
    parser.add_argument("--validate", metavar="REFERENCE_DIR", default=None,
                        help="compare the written tables with a reference directory")
    parser.add_argument("--plot", metavar="VEHICLE/SHELL", default=None,
                        help="save a plot of one shell's range table")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging")
    return parser.parse_args(argv)


def plot_shell(config: BatchConfig, target: str) -> None:
    from fcsballistics.visualization import plot_range_table, output_dir

    vehicle, _, shell = target.partition('/')
    data = parse_data_file(config.input_dir / f"{vehicle}.txt")
    matches = [p for p in data.projectiles if p.output_name == shell]
    if not matches:
        logger.error("no shell %r in vehicle %r", shell, vehicle)
        return

    rows = build_range_table(matches[-1].record, config.sensitivity, DensityTable())
    if not rows:
        logger.warning("%s produced no range table", target)
        return

    save_path = output_dir() / f"{vehicle}_{shell}.png"
    plot_range_table(rows, title=target, save_path=str(save_path))
    print(f"  ✓ Saved: {save_path}")


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    config = BatchConfig(
        input_dir=args.input,
        output_dir=args.output,
        sensitivity=args.sensitivity,
        jobs=args.jobs,
        vehicles=args.vehicle,
    )

    start_time = time.time()
    section("RANGE TABLES")
    try:
        stats = run_batch(config)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    print(f"  Vehicles      : {stats.vehicles}")
    print(f"  Tables written: {stats.shells_written}")
    print(f"  Errors        : {stats.errors}")
    print(f"  Cache         : {stats.cache_entries} unique / {stats.lookups} lookups "
          f"({stats.reuse_pct:.0f}% reuse)")

    if args.validate:
        section("VALIDATION")
        report = validate_directory(config.output_dir, args.validate)
        print(f"  Passed : {len(report.passed)} ({report.pass_rate:.1f}%)")
        print(f"  Failed : {len(report.failed)}")
        print(f"  Missing: {len(report.missing)}")
        for name in report.failed[:30]:
            c = report.comparisons[name]
            print(f"    {name} line {c.first_mismatch}: expected '{c.expected_line}', "
                  f"got '{c.computed_line}'")

    if args.plot:
        section("PLOT")
        plot_shell(config, args.plot)

    section("COMPLETE")
    print(f"  Output: {config.output_dir.resolve()}")
    print(f"  Total runtime: {time.time() - start_time:.1f} seconds")
    return 1 if stats.errors else 0


if __name__ == "__main__":
    sys.exit(main())
