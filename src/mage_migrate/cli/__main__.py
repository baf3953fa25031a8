"""
Main Entry Point for mage-migrate CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `mage_migrate.cli.commands`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from mage_migrate import __version__
from mage_migrate.cli import commands
from mage_migrate.config import DiConflictPolicy, parse_cli_key_values
from mage_migrate.utils.console import log_error


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="mage-migrate: Magento 1 to Magento 2 code migration")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CONVERT ---
  cmd_conv = subparsers.add_parser("convert", help="Migrate a PHP file or directory")
  cmd_conv.add_argument("path", type=Path, help="Input source file or directory")
  cmd_conv.add_argument("--out", type=Path, help="Output destination (file or dir)")
  cmd_conv.add_argument(
    "--strict",
    action="store_true",
    default=None,
    help="Fail files containing legacy calls that cannot be mapped (Overrides config)",
  )
  cmd_conv.add_argument(
    "--conflict-policy",
    choices=[p.value for p in DiConflictPolicy],
    default=None,
    help="How to settle a DI variable required with two types (default: from toml, else last_wins)",
  )
  cmd_conv.add_argument("--report", type=Path, default=None, help="Write a per-file JSON report")
  cmd_conv.add_argument(
    "--json-trace", type=Path, default=None, help="Dump the execution trace of a single file to JSON."
  )
  cmd_conv.add_argument(
    "--config",
    nargs="*",
    help="Configuration flags in key=value format (e.g. file_extensions=.php)",
  )

  # --- Command: VIEW MAPPING ---
  cmd_view = subparsers.add_parser("view-mapping", help="Map M1 layout handles to M2 layout handles")
  cmd_view.add_argument("m1", type=Path, help="Base directory of M1")
  cmd_view.add_argument("m2", type=Path, help="Base directory of M2")
  cmd_view.add_argument(
    "--out-dir",
    type=Path,
    default=Path("mapping"),
    help="Directory receiving view_mapping_<area>.json (default: ./mapping)",
  )

  args = parser.parse_args(argv)

  if args.command == "convert":
    try:
      settings = parse_cli_key_values(args.config)
    except ValueError as e:
      log_error(str(e))
      return 1
    return commands.handle_convert(
      args.path, args.out, args.strict, args.conflict_policy, settings, args.report, args.json_trace
    )

  elif args.command == "view-mapping":
    return commands.handle_view_mapping(args.m1, args.m2, args.out_dir)

  return 1


if __name__ == "__main__":
  raise SystemExit(main())
