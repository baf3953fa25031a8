"""
View Mapping Command Handler.

Implements `mage-migrate view-mapping`, writing one
``view_mapping_<area>.json`` per area from an M1 and an M2 checkout.
"""

from pathlib import Path

from rich.markup import escape

from mage_migrate.utils.console import log_error, log_success
from mage_migrate.views import ViewMapper


def handle_view_mapping(m1_dir: Path, m2_dir: Path, out_dir: Path) -> int:
  """
  Handles the 'view-mapping' command execution.

  Args:
      m1_dir: Magento 1 installation root.
      m2_dir: Magento 2 installation root.
      out_dir: Directory receiving the JSON files.

  Returns:
      int: Exit code.
  """
  if not m1_dir.is_dir():
    log_error(f"m1 path doesn't exist or is not a directory: {escape(str(m1_dir))}")
    return 1
  if not m2_dir.is_dir():
    log_error(f"m2 path doesn't exist or is not a directory: {escape(str(m2_dir))}")
    return 1

  try:
    written = ViewMapper(m1_dir, m2_dir).write(out_dir)
  except OSError as e:
    log_error(escape(f"Could not write view mapping to {out_dir}: {e}"))
    return 1

  for path in written:
    log_success(f"Generated [path]{escape(str(path))}[/path]")
  return 0
