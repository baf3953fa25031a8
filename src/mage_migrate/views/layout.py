"""
Magento 1 layout XML reader.

A layout file is a ``<layout>`` root whose direct children are layout
handles (``<catalog_product_view>``, ``<default>``...).
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def _strip_namespace(tag: str) -> str:
  if tag.startswith("{"):
    return tag.split("}", 1)[1]
  return tag


def layout_handles(source: str) -> List[str]:
  """
  Returns the handle names declared by a layout document, in file order.

  Duplicate handles are reported once. Comments and processing
  instructions are skipped.

  Raises:
      xml.etree.ElementTree.ParseError: If ``source`` is not well-formed.
  """
  root = ET.fromstring(source)
  handles: List[str] = []
  for child in root:
    if not isinstance(child.tag, str):
      continue
    name = _strip_namespace(child.tag)
    if name not in handles:
      handles.append(name)
  return handles


def read_layout_handles(path: Path) -> List[str]:
  """File variant of :func:`layout_handles`. Unparsable files yield no handles."""
  try:
    return layout_handles(path.read_text(encoding="utf-8"))
  except ET.ParseError as e:
    logger.warning("Skipping malformed layout file %s: %s", path, e)
    return []
