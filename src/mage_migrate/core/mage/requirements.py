"""
Dependency Injection Requirements.

A ``DiVariable`` declares that the enclosing class needs a constructor
injected collaborator. ``DiRequirements`` accumulates them over one file,
keyed by variable name.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator

from mage_migrate.config import DiConflictPolicy
from mage_migrate.core.errors import DependencyConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiVariable:
  name: str
  type: str

  def as_dict(self) -> Dict[str, str]:
    return {"variable_name": self.name, "type": self.type}


def variable_name_for(class_name: str) -> str:
  """
  Derives a camelCase property name from a fully qualified class name.

  The vendor segment and ``Model`` segments are dropped, and a trailing
  ``Helper\\Data`` collapses to ``Helper``:

  - ``\\Magento\\Catalog\\Model\\ProductFactory`` -> ``catalogProductFactory``
  - ``\\Magento\\Catalog\\Helper\\Data`` -> ``catalogHelper``

  Args:
      class_name: Fully qualified class name, with or without leading backslash.

  Returns:
      str: The variable name, without ``$``.
  """
  parts = [p for p in class_name.strip("\\").split("\\") if p]
  if len(parts) > 1:
    parts = parts[1:]
  if len(parts) > 2 and parts[-2:] == ["Helper", "Data"]:
    parts = parts[:-1]
  kept = [p for p in parts if p != "Model"] or parts
  name = "".join(kept)
  return name[:1].lower() + name[1:]


class DiRequirements:
  """
  Mapping of variable name to ``DiVariable`` for a single file.

  Insertion order follows scan order. Re-adding a name keeps its original
  position; only the value changes.
  """

  def __init__(self, policy: DiConflictPolicy = DiConflictPolicy.LAST_WINS):
    self.policy = policy
    self._items: Dict[str, DiVariable] = {}

  def add(self, variable: DiVariable) -> None:
    """
    Records a requirement.

    Raises:
        DependencyConflictError: Under the STRICT policy, when the name is
            already bound to a different type.
    """
    existing = self._items.get(variable.name)
    if existing is not None and existing.type != variable.type:
      if self.policy == DiConflictPolicy.STRICT:
        raise DependencyConflictError(
          f"${variable.name} required as both {existing.type} and {variable.type}",
          pattern=variable.name,
        )
      logger.warning("DI variable $%s: %s replaced by %s", variable.name, existing.type, variable.type)
    self._items[variable.name] = variable

  def as_dict(self) -> Dict[str, DiVariable]:
    return dict(self._items)

  def __len__(self) -> int:
    return len(self._items)

  def __bool__(self) -> bool:
    return bool(self._items)

  def __iter__(self) -> Iterator[str]:
    return iter(self._items)

  def __getitem__(self, name: str) -> DiVariable:
    return self._items[name]

  def __contains__(self, name: object) -> bool:
    return name in self._items
