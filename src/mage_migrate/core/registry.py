"""
Helper Registry.

A name-keyed factory building helper objects on request. The processor never
looks helpers up itself; it receives a builder (see ``helper_factory``) when
it is set up.
"""

import logging
from functools import partial
from typing import Any, Callable, Dict, List, Type

from mage_migrate.core.errors import InjectorFactoryError

logger = logging.getLogger(__name__)

_HELPER_REGISTRY: Dict[str, Type[Any]] = {}


def register_helper(name: str):
  def wrapper(cls):
    _HELPER_REGISTRY[name] = cls
    return cls

  return wrapper


def available_helpers() -> List[str]:
  return sorted(_HELPER_REGISTRY)


def create_helper(name: str, **kwargs: Any) -> Any:
  """
  Builds a new instance of the helper registered under ``name``.

  Raises:
      InjectorFactoryError: If nothing is registered under ``name`` or the
          constructor fails. Construction is never retried.
  """
  cls = _HELPER_REGISTRY.get(name)
  if cls is None:
    raise InjectorFactoryError(f"No helper registered as '{name}'. Known: {available_helpers()}")
  try:
    return cls(**kwargs)
  except Exception as e:
    logger.debug("Helper '%s' failed to build", name, exc_info=True)
    raise InjectorFactoryError(f"Failed to build helper '{name}': {e}") from e


def helper_factory(name: str, **kwargs: Any) -> Callable[[], Any]:
  """Returns a zero-argument builder for the helper registered under ``name``."""
  return partial(create_helper, name, **kwargs)
