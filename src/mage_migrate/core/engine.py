"""
Orchestration Engine for Text-Level Migrations.

This module provides the `MigrationEngine`, the entry point for migrating a
single PHP source file held in memory.

The Engine pipeline consists of:

1.  **Tokenization**: the source text is split into a `TokenStream`.
2.  **Processing**: a fresh `MageProcessor` rewrites legacy ``Mage::`` calls
    and wires the required collaborators into the class constructor.
3.  **Reporting**: rewritten calls, unresolved calls, injected collaborators
    and the trace log are collected into a `ConversionResult`.

Each call to `run` builds its own processor, requirement map and trace log,
so one engine may be shared by callers migrating files in parallel.
"""

from typing import Callable, Optional

from mage_migrate.config import RuntimeConfig
from mage_migrate.core.conversion_result import ConversionResult
from mage_migrate.core.errors import MigrationError, UnresolvedInvocationError
from mage_migrate.core.mage.matcher import MageFunctionMatcher
from mage_migrate.core.processor import MageProcessor
from mage_migrate.core.token_stream import TokenStream
from mage_migrate.core.tracer import TraceLogger
from mage_migrate.mapping import ClassResolver


class MigrationEngine:
  """
  The main migration unit.

  Holds the read-only parts of a run (configuration, class resolver and the
  injector factory); everything mutable is created per file.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    resolver: Optional[ClassResolver] = None,
    injector_factory: Optional[Callable] = None,
  ):
    """
    Initializes the Engine.

    Args:
        config (RuntimeConfig, optional): Runtime settings. Loaded from
            ``pyproject.toml`` if None.
        resolver (ClassResolver, optional): Alias lookup tables. Built from
            the packaged tables and ``config`` if None.
        injector_factory (Callable, optional): Builder for the constructor
            injector. The processor default is used if None.
    """
    self.config = config or RuntimeConfig.load()
    self.resolver = resolver or ClassResolver.load(self.config)
    self.injector_factory = injector_factory
    self.strict_mode = self.config.strict_mode

  def run(self, code: str, file_path: Optional[str] = None) -> ConversionResult:
    """
    Executes the migration pipeline on one file.

    Args:
        code (str): PHP source text.
        file_path (str, optional): Source path used in errors and reports.

    Returns:
        ConversionResult: Migrated code and report. On failure, ``code``
        holds the unchanged input and ``success`` is False.
    """
    tracer = TraceLogger()
    tracer.start_phase("Migration Pipeline", file_path or "<input>")

    processor = MageProcessor(
      matcher=MageFunctionMatcher(self.resolver),
      injector_factory=self.injector_factory,
      conflict_policy=self.config.conflict_policy,
      tracer=tracer,
      file_path=file_path,
    )

    try:
      stream = TokenStream.from_source(code)
      migrated = processor.process(stream)
    except MigrationError as e:
      if file_path and not e.file_path:
        e = e.with_file(file_path)
      tracer.log_warning(str(e))
      tracer.end_phase()
      return ConversionResult(
        code=code,
        file_path=file_path,
        errors=[str(e)],
        success=False,
        trace_events=tracer.export(),
      )

    errors = []
    if self.strict_mode and processor.unresolved:
      for item in processor.unresolved:
        err = UnresolvedInvocationError(
          str(item["reason"]),
          file_path=file_path,
          span=tuple(item["span"]),
          pattern=str(item["legacy_symbol"]),
        )
        errors.append(str(err))

    tracer.end_phase()
    if errors:
      return ConversionResult(
        code=code,
        file_path=file_path,
        errors=errors,
        success=False,
        unresolved=processor.unresolved,
        trace_events=tracer.export(),
      )

    return ConversionResult(
      code=migrated.render(),
      file_path=file_path,
      success=True,
      conversions=processor.conversions,
      unresolved=processor.unresolved,
      injected=processor.injected,
      trace_events=tracer.export(),
    )
