"""
Class Alias Resolution.

Magento 1 code addresses classes through factory aliases such as
``'catalog/product'``. Resolution happens in two steps:

1.  Alias -> M1 class: the group (``catalog``) names a module
    (``Mage_Catalog``) and the path (``product_collection``) is upper-cased
    word by word, giving ``Mage_Catalog_Model_Product_Collection``.
2.  M1 class -> M2 class: an explicit class table wins; otherwise the module
    prefix is swapped for its Magento 2 namespace and underscores become
    namespace separators (``Model_Resource`` becomes ``Model\\ResourceModel``).

Either step may yield ``None`` (unknown group, obsolete module or class).
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from mage_migrate.config import RuntimeConfig
from mage_migrate.mapping.paths import resolve_mapping_dir

logger = logging.getLogger(__name__)

OBSOLETE = "obsolete"


class AliasKind(str, Enum):
  """Factory method family an alias is resolved for."""

  MODEL = "Model"
  RESOURCE_MODEL = "Model_Resource"
  HELPER = "Helper"


class ClassResolver:
  """
  Resolves M1 factory aliases and class names to fully qualified M2 classes.

  Attributes:
      groups (Dict[str, str]): Alias group -> M1 module (``catalog`` -> ``Mage_Catalog``).
      modules (Dict[str, str]): M1 module -> M2 namespace overrides.
      classes (Dict[str, str]): M1 class -> M2 class overrides.
  """

  def __init__(
    self,
    groups: Optional[Dict[str, str]] = None,
    modules: Optional[Dict[str, str]] = None,
    classes: Optional[Dict[str, str]] = None,
  ):
    self.groups = {k.lower(): v for k, v in (groups or {}).items()}
    self.modules = dict(modules or {})
    self.classes = dict(classes or {})

  @classmethod
  def load(cls, config: Optional[RuntimeConfig] = None) -> "ClassResolver":
    """
    Builds a resolver from the packaged tables plus configuration overrides.

    Args:
        config: Optional runtime configuration contributing extra aliases,
            class mappings and a mapping file.

    Returns:
        ClassResolver: The populated resolver.
    """
    base = resolve_mapping_dir()
    aliases = _read_json(base / "aliases.json")
    classes = _read_json(base / "class_mapping.json")

    groups = dict(aliases.get("groups", {}))
    modules = dict(aliases.get("modules", {}))

    if config:
      if config.mapping_path:
        classes.update(_read_json(config.mapping_path))
      groups.update(config.module_aliases)
      classes.update(config.class_mapping)

    return cls(groups=groups, modules=modules, classes=classes)

  def m1_class(self, alias: str, kind: AliasKind) -> Optional[str]:
    """
    Expands a factory alias into an M1 class name.

    Helper aliases without a path (``'catalog'``) address the module's
    ``Data`` helper. Arguments that already are class names pass through.

    Args:
        alias: The literal alias, e.g. ``'catalog/product'``.
        kind: Which factory method family the alias was passed to.

    Returns:
        Optional[str]: The M1 class name, or None for unknown groups.
    """
    alias = alias.strip()
    if not alias:
      return None

    if "/" not in alias:
      if "_" in alias and alias[0].isupper():
        return alias
      if kind != AliasKind.HELPER:
        return None
      alias = f"{alias}/data"

    group, _, path = alias.partition("/")
    module = self.groups.get(group.lower())
    if not module or not path:
      return None

    words = "_".join(part[:1].upper() + part[1:] for part in path.split("_") if part)
    return f"{module}_{kind.value}_{words}"

  def m2_class(self, m1_class: str) -> Optional[str]:
    """
    Maps an M1 class name to its M2 counterpart.

    Returns:
        Optional[str]: Fully qualified name with a leading backslash, or None
        if the class or its module is obsolete.
    """
    explicit = self.classes.get(m1_class)
    if explicit is not None:
      return None if explicit == OBSOLETE else "\\" + explicit.lstrip("\\")

    parts = m1_class.split("_")
    if len(parts) < 3:
      return None

    module = "_".join(parts[:2])
    namespace = self.modules.get(module)
    if namespace == OBSOLETE:
      return None
    if namespace is None:
      vendor = "Magento" if parts[0] == "Mage" else parts[0]
      namespace = f"{vendor}\\{parts[1]}"

    rest = parts[2:]
    if len(rest) > 1 and rest[0] == "Model" and rest[1] == "Resource":
      rest = ["Model", "ResourceModel", *rest[2:]]

    return "\\" + "\\".join([namespace, *rest])

  def resolve(self, alias: str, kind: AliasKind) -> Optional[str]:
    """Alias -> M2 class in one step. Returns None when unresolvable."""
    m1 = self.m1_class(alias, kind)
    if m1 is None:
      logger.debug("Unknown class alias '%s' (%s)", alias, kind.name)
      return None
    return self.m2_class(m1)


def _read_json(path: Path) -> Dict:
  with open(path, "rt", encoding="utf-8") as f:
    return json.load(f)
