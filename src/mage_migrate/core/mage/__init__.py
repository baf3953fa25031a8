"""
Legacy ``Mage::`` facade recognition and rewriting.

- ``matcher``: Ordered catalog dispatch locating call sites.
- ``functions``: One rewrite strategy per recognised call shape.
- ``requirements``: DI variables collected while rewriting a file.
"""

from mage_migrate.core.mage.functions import MageFunction, MageFunctionKind, UnresolvedFunction
from mage_migrate.core.mage.matcher import CATALOG, MageFunctionMatcher
from mage_migrate.core.mage.requirements import DiRequirements, DiVariable, variable_name_for

__all__ = [
  "CATALOG",
  "DiRequirements",
  "DiVariable",
  "MageFunction",
  "MageFunctionKind",
  "MageFunctionMatcher",
  "UnresolvedFunction",
  "variable_name_for",
]
