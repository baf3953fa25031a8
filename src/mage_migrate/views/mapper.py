"""
Layout Handle Mapper.

Maps Magento 1 layout handles onto the layout handle files of a Magento 2
code base. Matching is a string heuristic: every M2 handle (the basename of a
``view/<area>/layout/*.xml`` file) is placed in one space-delimited index,
and an ordered list of regex candidates derived from the M1 handle is tried
against it. The first candidate that hits wins; handles with no hit map to
``"obsolete"``.

Candidate order:

1.  The handle itself.
2.  Its plural form: any ``word_`` may gain one character (``product_`` ->
    ``products_``).
3.  ``adminhtml`` area: the handle without its ``adminhtml_`` prefix, then
    that stripped handle with one word inserted at each underscore, with one
    word prefixed, and with two words prefixed.
    Other areas: ``enterprise_`` handles are tried as plural ``magento_``
    handles, then the handle is tried with a ``page_`` prefix.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from mage_migrate.views.layout import read_layout_handles

logger = logging.getLogger(__name__)

OBSOLETE = "obsolete"

# Area -> M1 design packages searched for layout files.
AREAS: Dict[str, Sequence[str]] = {
  "adminhtml": ("default", "enterprise"),
  "frontend": ("base", "default", "enterprise"),
}

# Layout files sit at most two directories below ``layout/``.
_LAYOUT_GLOBS = ("*.xml", "*/*.xml", "*/*/*.xml")

# One handle word; never spans the space separating two handles.
_WORD = r"([^_\s]+)"


def plural(pattern: str) -> str:
  return pattern.replace("_", r"\S?_")


class M2HandleIndex:
  """
  Space-delimited index of Magento 2 layout handles for one area.
  """

  def __init__(self, handles: Iterable[str]):
    self.handles = list(handles)
    self._text = "".join(f" {h} " for h in self.handles)

  @classmethod
  def from_directory(cls, m2_root: Path, area: str) -> "M2HandleIndex":
    """
    Collects handle names from ``app/code/*/*/view/{area,base}/layout/*.xml``.
    """
    code_dir = Path(m2_root) / "app" / "code"
    files = sorted(code_dir.glob(f"*/*/view/{area}/layout/*.xml")) + sorted(
      code_dir.glob("*/*/view/base/layout/*.xml")
    )
    return cls(f.stem for f in files)

  def find(self, pattern: str) -> Optional[str]:
    """
    Searches the index for a handle matching ``pattern`` (case-insensitive).

    Returns:
        Optional[str]: The matched M2 handle, or None.
    """
    match = re.search(f" ({pattern}) ", self._text, re.IGNORECASE)
    return match.group(1) if match else None


def candidates(handle: str, area: str) -> Iterator[str]:
  """Yields regex candidates for ``handle`` in precedence order."""
  escaped = re.escape(handle)
  yield escaped
  yield plural(escaped)

  if area == "adminhtml":
    stripped = re.sub(r"^adminhtml_", "", escaped)
    yield stripped
    yield stripped.replace("_", f"_{_WORD}_")
    yield f"{_WORD}_{stripped}"
    yield f"{_WORD}_{_WORD}_{stripped}"
  else:
    if escaped.startswith("enterprise_"):
      yield plural(re.sub(r"^enterprise_", "magento_", escaped))
    yield f"page_{escaped}"


def map_handle(handle: str, area: str, index: M2HandleIndex) -> str:
  """
  Maps one M1 layout handle.

  Returns:
      str: The matching M2 handle, or ``"obsolete"``.
  """
  for pattern in candidates(handle, area):
    found = index.find(pattern)
    if found is not None:
      return found
  return OBSOLETE


class ViewMapper:
  """
  Builds ``view_mapping_<area>.json`` files from an M1 and an M2 checkout.

  Attributes:
      m1_root (Path): Magento 1 installation root (holding ``app/design``).
      m2_root (Path): Magento 2 installation root (holding ``app/code``).
  """

  def __init__(self, m1_root: Path, m2_root: Path, areas: Optional[Dict[str, Sequence[str]]] = None):
    self.m1_root = Path(m1_root)
    self.m2_root = Path(m2_root)
    self.areas = areas or AREAS

  def m1_layout_files(self, area: str) -> List[Path]:
    files: List[Path] = []
    for package in self.areas[area]:
      layout_dir = self.m1_root / "app" / "design" / area / package / "default" / "layout"
      for pattern in _LAYOUT_GLOBS:
        files.extend(sorted(layout_dir.glob(pattern)))
    return files

  def map_area(self, area: str) -> Dict[str, str]:
    """
    Maps every handle declared by the area's M1 layout files.

    When several files declare a handle, the first file read decides.

    Returns:
        Dict[str, str]: M1 handle -> M2 handle or ``"obsolete"``.
    """
    index = M2HandleIndex.from_directory(self.m2_root, area)
    logger.debug("%d Magento 2 handles indexed for %s", len(index.handles), area)

    mapping: Dict[str, str] = {}
    for layout_file in self.m1_layout_files(area):
      for handle in read_layout_handles(layout_file):
        if handle not in mapping:
          mapping[handle] = map_handle(handle, area, index)
    return mapping

  def write(self, out_dir: Path) -> List[Path]:
    """
    Writes one lower-cased ``view_mapping_<area>.json`` per area.

    Returns:
        List[Path]: The files written.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for area in self.areas:
      mapping = self.map_area(area)
      out_file = out_dir / f"view_mapping_{area}.json"
      with open(out_file, "wt", encoding="utf-8") as f:
        f.write(json.dumps(mapping, indent=4).lower())
      logger.info("%s was generated (%d handles)", out_file, len(mapping))
      written.append(out_file)
    return written
