"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Helper registry isolation so tests registering stub helpers never leak.
- A small, fixed class resolver and PHP source builders.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'mage_migrate' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Registers the default helpers so they are part of the restored baseline.
import mage_migrate.core.processor  # noqa: E402,F401
from mage_migrate.core.registry import _HELPER_REGISTRY  # noqa: E402
from mage_migrate.mapping import ClassResolver  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_helper_registry():
  """
  Ensures helpers registered by a test do not leak into the next one.
  """
  original_registry = _HELPER_REGISTRY.copy()
  yield
  _HELPER_REGISTRY.clear()
  _HELPER_REGISTRY.update(original_registry)


@pytest.fixture
def resolver():
  """Resolver over the packaged lookup tables."""
  return ClassResolver.load()

