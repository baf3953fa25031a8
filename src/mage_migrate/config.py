"""
Runtime Configuration Store.

Settings are read from the ``[tool.mage_migrate]`` table of the nearest
``pyproject.toml`` and overridden by CLI arguments.
"""

import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class DiConflictPolicy(str, Enum):
  """
  Policy applied when two DI requirements share a variable name.

  LAST_WINS keeps the requirement seen last in scan order (a warning is
  logged when the types differ). STRICT aborts the file instead.
  """

  LAST_WINS = "last_wins"
  STRICT = "strict"


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the migration engine.
  """

  strict_mode: bool = Field(False, description="If True, unresolved legacy calls fail the file.")
  conflict_policy: DiConflictPolicy = Field(
    DiConflictPolicy.LAST_WINS,
    description="How to resolve DI requirements sharing a variable name.",
  )
  file_extensions: List[str] = Field(
    default_factory=lambda: [".php", ".phtml"],
    description="File suffixes picked up when converting a directory.",
  )
  module_aliases: Dict[str, str] = Field(
    default_factory=dict,
    description="Extra class group aliases (e.g. {'mymodule': 'Acme_MyModule'}).",
  )
  class_mapping: Dict[str, str] = Field(
    default_factory=dict,
    description="Extra M1 class -> M2 class overrides. Use 'obsolete' to block a class.",
  )
  mapping_path: Optional[Path] = Field(None, description="JSON file holding extra class mappings.")

  @field_validator("file_extensions")
  @classmethod
  def normalize_extensions(cls, v: List[str]) -> List[str]:
    """
    Ensures every extension is lower-case and dot-prefixed.

    Args:
        v (List[str]): Raw extensions.

    Returns:
        List[str]: Normalized extensions.
    """
    cleaned = []
    for ext in v:
      ext = ext.strip().lower()
      if not ext:
        continue
      cleaned.append(ext if ext.startswith(".") else f".{ext}")
    return cleaned

  @classmethod
  def load(
    cls,
    strict_mode: Optional[bool] = None,
    conflict_policy: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        strict_mode (Optional[bool]): Override for strict mode setting.
        conflict_policy (Optional[str]): Override for the DI conflict policy.
        overrides (Optional[Dict]): Additional ``key=value`` CLI settings.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)
    data = {**toml_config, **(overrides or {})}

    if strict_mode is not None:
      data["strict_mode"] = strict_mode
    if conflict_policy is not None:
      data["conflict_policy"] = conflict_policy

    # Relative mapping files are anchored at the pyproject that declared them.
    raw_mapping = data.get("mapping_path")
    if raw_mapping and toml_dir and "mapping_path" in toml_config and not Path(raw_mapping).is_absolute():
      data["mapping_path"] = (toml_dir / raw_mapping).resolve()

    return cls.model_validate(data)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      with open(toml_path, "rb") as f:
        data = tomllib.load(f)

      tool_section = data.get("tool", {})
      return tool_section.get("mage_migrate", {}), parent

  return {}, None


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses a list of 'key=value' strings into a dictionary.

  Types are inferred (int, float, bool, or string).

  Args:
      items (Optional[List[str]]): List of raw CLI strings directly from argparse.

  Returns:
      Dict[str, Any]: Parsed dictionary.

  Raises:
      ValueError: If an item does not contain '='.
  """
  if not items:
    return {}

  config = {}
  for item in items:
    if "=" not in item:
      raise ValueError(f"Invalid config format: '{item}'. Expected 'key=value'.")

    key, val_str = item.split("=", 1)
    key = key.strip()
    val_str = val_str.strip()

    final_val: Any = val_str

    if val_str.lower() == "true":
      final_val = True
    elif val_str.lower() == "false":
      final_val = False
    else:
      try:
        if "." in val_str or "e" in val_str:
          final_val = float(val_str)
        else:
          final_val = int(val_str)
      except ValueError:
        pass

    config[key] = final_val

  return config
