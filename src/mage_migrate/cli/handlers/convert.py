"""
Convert Command Handler.

This module implements the logic for the `mage-migrate convert` command.
It orchestrates:
1. Configuration loading (pyproject.toml + CLI overrides).
2. File discovery for directory inputs.
3. Migration of each file via the Engine, isolated per file.
4. Output writing, the optional JSON report and the summary table.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.markup import escape
from rich.table import Table

from mage_migrate.config import RuntimeConfig
from mage_migrate.core.conversion_result import ConversionResult
from mage_migrate.core.engine import MigrationEngine
from mage_migrate.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_convert(
  input_path: Path,
  output_path: Optional[Path],
  strict: Optional[bool],
  conflict_policy: Optional[str],
  settings: Dict[str, Any],
  report_path: Optional[Path] = None,
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'convert' command execution.

  Args:
      input_path: PHP file or directory to migrate.
      output_path: Destination file (or directory for directory inputs).
          Single files are printed to stdout when omitted.
      strict: If True, unresolved legacy calls fail their file.
      conflict_policy: Override for the DI conflict policy.
      settings: Additional ``key=value`` configuration overrides.
      report_path: Optional JSON file receiving the per-file report.
      json_trace_path: Optional JSON file receiving the trace of a single file.

  Returns:
      int: Exit code (0 when every file migrated, 1 otherwise).
  """
  if not input_path.exists():
    log_error(f"Input not found: {escape(str(input_path))}")
    return 1

  try:
    config = RuntimeConfig.load(
      strict_mode=strict,
      conflict_policy=conflict_policy,
      overrides=settings,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
    engine = MigrationEngine(config=config)
  except (ValueError, OSError) as e:
    log_error(f"Invalid configuration: {escape(str(e))}")
    return 1

  batch_results: Dict[str, ConversionResult] = {}

  if input_path.is_file():
    result = _convert_single_file(input_path, output_path, engine, json_trace_path)
    batch_results[input_path.name] = result

  else:
    if not output_path:
      log_error("Directory conversion requires --out destination directory.")
      return 1

    php_files = _discover_files(input_path, config.file_extensions)
    if not php_files:
      log_warning(f"No {', '.join(config.file_extensions)} files found in {escape(str(input_path))}")
      return 0

    log_info(f"Processing {len(php_files)} files from [path]{escape(str(input_path))}[/path]...")
    for src_file in php_files:
      rel_path = src_file.relative_to(input_path)
      batch_results[str(rel_path)] = _convert_single_file(src_file, output_path / rel_path, engine)

  if report_path:
    _write_report(report_path, batch_results)

  _print_batch_summary(batch_results)
  return 0 if all(r.success for r in batch_results.values()) else 1


def _discover_files(root: Path, extensions: List[str]) -> List[Path]:
  return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in extensions)


def _convert_single_file(
  input_path: Path,
  output_path: Optional[Path],
  engine: MigrationEngine,
  json_trace_path: Optional[Path] = None,
) -> ConversionResult:
  """
  Migrates one file. Any failure is captured in the returned result.

  Args:
      input_path: Source file path.
      output_path: Destination file path; stdout when None.
      engine: Shared engine.
      json_trace_path: Path to save trace event logs.

  Returns:
      ConversionResult: Result object containing status and code.
  """
  try:
    with open(input_path, "rt", encoding="utf-8") as f:
      code = f.read()
    result = engine.run(code, file_path=str(input_path))

    if json_trace_path and result.trace_events:
      json_trace_path.parent.mkdir(parents=True, exist_ok=True)
      with open(json_trace_path, "wt", encoding="utf-8") as f:
        json.dump(result.trace_events, f, indent=2)
      log_info(f"Trace saved to [path]{escape(str(json_trace_path))}[/path]")

    if not result.success:
      log_error(f"Failed to migrate [path]{escape(str(input_path))}[/path]")
      return result

    for item in result.unresolved:
      log_warning(escape(f"{input_path}: {item['legacy_symbol']} left unchanged ({item['reason']})"))

    if output_path:
      output_path.parent.mkdir(parents=True, exist_ok=True)
      with open(output_path, "wt", encoding="utf-8") as f:
        f.write(result.code)
      log_success(f"Migrated: [path]{escape(str(input_path))}[/path] -> [path]{escape(str(output_path))}[/path]")
    else:
      print(result.code)

    return result
  except (OSError, UnicodeDecodeError) as e:
    log_error(escape(f"Failed to migrate {input_path}: {e}"))
    return ConversionResult(file_path=str(input_path), success=False, errors=[str(e)])


def _write_report(report_path: Path, results: Dict[str, ConversionResult]) -> None:
  report = {
    name: res.model_dump(include={"file_path", "success", "errors", "conversions", "unresolved", "injected"})
    for name, res in results.items()
  }
  report_path.parent.mkdir(parents=True, exist_ok=True)
  with open(report_path, "wt", encoding="utf-8") as f:
    json.dump(report, f, indent=2)
  log_info(f"Report saved to [path]{escape(str(report_path))}[/path]")


def _print_batch_summary(results: Dict[str, ConversionResult]) -> None:
  """
  Renders a summary table of migration results to the console.

  Args:
      results: Dictionary mapping filenames to conversion results.
  """
  total = len(results)
  clean = sum(1 for r in results.values() if r.success and not r.unresolved)
  issues = total - clean

  if issues == 0:
    log_success(f"Batch Complete: {clean}/{total} files migrated completely.")
    return

  table = Table(title="Migration Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success and not res.unresolved:
      continue
    if not res.success:
      status = "❌ Failed"
      detail = "; ".join(res.errors) if res.errors else "Unknown Error"
    else:
      status = "⚠️ Unresolved"
      detail = "; ".join(str(u["legacy_symbol"]) for u in res.unresolved)
    table.add_row(escape(filename), status, escape(detail))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {clean} Complete, {issues} with Issues.")
