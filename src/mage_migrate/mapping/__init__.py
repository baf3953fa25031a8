"""
Static lookup tables resolving Magento 1 class aliases to Magento 2 classes.
"""

from mage_migrate.mapping.resolver import OBSOLETE, AliasKind, ClassResolver

__all__ = ["OBSOLETE", "AliasKind", "ClassResolver"]
