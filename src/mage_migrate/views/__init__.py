"""
Magento 1 -> Magento 2 layout handle mapping.
"""

from mage_migrate.views.layout import layout_handles, read_layout_handles
from mage_migrate.views.mapper import AREAS, OBSOLETE, M2HandleIndex, ViewMapper, candidates, map_handle

__all__ = [
  "AREAS",
  "OBSOLETE",
  "M2HandleIndex",
  "ViewMapper",
  "candidates",
  "layout_handles",
  "map_handle",
  "read_layout_handles",
]
