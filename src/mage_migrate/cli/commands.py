"""
CLI Command Handlers Facade.

Re-exports the handlers from `mage_migrate.cli.handlers` so the entry point
and tests patch a single module.
"""

from mage_migrate.cli.handlers.convert import (
  _convert_single_file,
  _print_batch_summary,
  handle_convert,
)
from mage_migrate.cli.handlers.views import handle_view_mapping

__all__ = [
  "_convert_single_file",
  "_print_batch_summary",
  "handle_convert",
  "handle_view_mapping",
]
