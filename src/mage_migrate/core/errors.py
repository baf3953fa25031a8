"""
Migration Error Taxonomy.

Structural outcomes (no match, no class in file) are never raised. The
exceptions below represent conditions that stop processing of the current
file. Callers processing batches catch ``MigrationError`` per file so one
failure never aborts independent files.
"""

from typing import Optional, Tuple


class MigrationError(Exception):
  """
  Base class for fatal, per-file migration failures.

  Attributes:
      reason (str): Human-readable explanation.
      file_path (Optional[str]): File being processed, when known.
      span (Optional[Tuple[int, int]]): Token span ``[start, end)`` involved.
      pattern (Optional[str]): Legacy symbol or construct involved.
  """

  def __init__(
    self,
    reason: str,
    file_path: Optional[str] = None,
    span: Optional[Tuple[int, int]] = None,
    pattern: Optional[str] = None,
  ):
    self.reason = reason
    self.file_path = file_path
    self.span = span
    self.pattern = pattern
    super().__init__(self._format())

  def _format(self) -> str:
    parts = []
    if self.file_path:
      parts.append(str(self.file_path))
    if self.span is not None:
      parts.append(f"tokens {self.span[0]}..{self.span[1]}")
    if self.pattern:
      parts.append(self.pattern)
    prefix = f"[{', '.join(parts)}] " if parts else ""
    return f"{prefix}{self.reason}"

  def with_file(self, file_path: Optional[str]) -> "MigrationError":
    """Returns a copy of this error bound to ``file_path``."""
    return type(self)(self.reason, file_path=file_path, span=self.span, pattern=self.pattern)


class TokenizeError(MigrationError):
  """Source text contains a character the lexer cannot classify."""


class StaleSpanError(MigrationError):
  """A matched span was used after the token stream had been edited."""


class InjectionError(MigrationError):
  """The constructor of the enclosing class cannot be located or extended."""


class InjectorFactoryError(MigrationError):
  """The helper factory could not build the dependency injector."""


class DependencyConflictError(MigrationError):
  """Two DI requirements share a variable name but differ in type."""


class UnresolvedInvocationError(MigrationError):
  """A legacy call was recognised but could not be mapped (strict mode only)."""
