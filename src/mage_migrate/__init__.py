"""
mage-migrate Package.

A token-level migration tool rewriting Magento 1 code that calls the static
``Mage::`` facade into Magento 2 code using constructor-injected services.

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import mage_migrate as mm
    code = "<?php class A { function f() { return Mage::helper('catalog'); } }"
    print(mm.convert(code))

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from mage_migrate import MigrationEngine, RuntimeConfig

    engine = MigrationEngine(config=RuntimeConfig(strict_mode=True))
    res = engine.run(source, file_path="Observer.php")

    if res.success:
        print(res.code)
    else:
        print(f"Errors: {res.errors}")
"""

from typing import Optional

from mage_migrate.config import RuntimeConfig
from mage_migrate.core.conversion_result import ConversionResult
from mage_migrate.core.engine import MigrationEngine

__version__ = "0.1.0"


def convert(code: str, strict: bool = False, config: Optional[RuntimeConfig] = None) -> str:
  """
  Migrates a string of Magento 1 PHP code.

  This is a high-level convenience wrapper around the `MigrationEngine`. For
  file-based conversions or batch processing, use ``mage_migrate.cli``.

  Args:
      code (str): The PHP source to migrate.
      strict (bool): If True, legacy calls that cannot be mapped fail the
          conversion instead of being left in place.
      config (RuntimeConfig, optional): Full configuration; overrides ``strict``.

  Returns:
      str: The migrated source code.

  Raises:
      ValueError: If the migration fails.
  """
  engine = MigrationEngine(config=config or RuntimeConfig(strict_mode=strict))
  result = engine.run(code)

  if not result.success:
    error_msg = "\n".join(result.errors)
    raise ValueError(f"Migration failed:\n{error_msg}")

  return result.code


__all__ = [
  "ConversionResult",
  "MigrationEngine",
  "RuntimeConfig",
  "convert",
  "__version__",
]
