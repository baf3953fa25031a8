"""
Path Resolution Utilities for Mapping Tables.

Handles locating the JSON lookup tables within the package or source tree.
"""

from importlib.resources import files
from pathlib import Path


def resolve_mapping_dir() -> Path:
  """
  Locates the directory containing the alias and class mapping JSON files.

  Prioritizes the local file system (relative to this file) so tests and
  editable installs read the source of truth. Falls back to package resources
  for installed distributions.

  Returns:
      Path: The absolute path to the mapping directory.
  """
  local_path = Path(__file__).parent
  if (local_path / "aliases.json").exists():
    return local_path

  return Path(str(files("mage_migrate.mapping")))
