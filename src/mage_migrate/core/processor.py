"""
Legacy Facade Processor.

Drives the migration of a single token stream through its lifecycle:

1.  **Gate**: files without a named class declaration are returned as is.
    Otherwise the first declared class becomes the injection target.
2.  **Scanning**: every ``Mage::`` call site is offered to the matcher.
    Calls nested in its arguments are rewritten first, then the call itself
    is matched again, rewritten in place, and scanning resumes right after
    the rewritten span, so a span is never visited twice. Collaborators are
    collected into a ``DiRequirements`` map. A call needing a collaborator
    outside the target class body, or inside one of its static methods, has
    no ``$this`` to reach it and is reported unresolved instead.
3.  **Injecting**: when collaborators were collected, an injector built by
    the supplied factory wires them into the class constructor.
4.  **Refresh**: the edited stream is re-tokenized into a canonical stream.

The processor holds no state between calls to ``process`` other than the
per-call report (``conversions`` / ``unresolved`` / ``injected``).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

# Registers the ``constructor_helper`` builder.
import mage_migrate.core.constructor  # noqa: F401
from mage_migrate.config import DiConflictPolicy
from mage_migrate.core.errors import InjectorFactoryError, MigrationError
from mage_migrate.core.lexer import Token
from mage_migrate.core.mage.functions import UnresolvedFunction
from mage_migrate.core.mage.matcher import MageFunctionMatcher
from mage_migrate.core.mage.requirements import DiRequirements
from mage_migrate.core.registry import helper_factory
from mage_migrate.core.token_stream import TokenStream, find_class_keyword
from mage_migrate.core.tokens import Symbol, TokenKind
from mage_migrate.core.tracer import TraceLogger

logger = logging.getLogger(__name__)

# A call site needs at least ``Mage``, ``::``, name and ``(`` after the cursor.
_MIN_CALL_TOKENS = 3

_MODIFIERS = frozenset({"public", "protected", "private", "final", "abstract", "static"})


@dataclass
class _InjectionScope:
  """
  Region of a stream whose calls can reach injected collaborators.

  Bounds are kept as tokens so that edits elsewhere only renumber them.

  Attributes:
      open_brace: ``{`` of the target class body.
      close_brace: Its matching ``}``.
      static_bodies: ``{``/``}`` pairs of the class's static methods.
  """

  open_brace: Token
  close_brace: Token
  static_bodies: List[Tuple[Token, Token]] = field(default_factory=list)

  @classmethod
  def locate(cls, stream: TokenStream, keyword: int) -> Optional["_InjectionScope"]:
    """Builds the scope of the class declared at ``keyword``, or None if its body is unbalanced."""
    open_brace = stream.next_index_of_kind(keyword, TokenKind.SYMBOL, Symbol.LBRACE.value)
    close_brace = stream.find_matching(open_brace) if open_brace is not None else None
    if close_brace is None:
      return None

    scope = cls(stream[open_brace], stream[close_brace])
    depth = 0
    for i in range(open_brace + 1, close_brace):
      tok = stream[i]
      if tok.kind == TokenKind.SYMBOL and tok.text in "{(":
        depth += 1
      elif tok.kind == TokenKind.SYMBOL and tok.text in "})":
        depth -= 1
      elif depth == 0 and tok.kind == TokenKind.KEYWORD and tok.text.lower() == "function":
        body = _static_method_body(stream, i)
        if body is not None:
          scope.static_bodies.append((stream[body[0]], stream[body[1]]))
    return scope

  def exclusion(self, index: int) -> Optional[str]:
    if not self.open_brace.index < index < self.close_brace.index:
      return "outside the class receiving collaborators"
    for open_brace, close_brace in self.static_bodies:
      if open_brace.index < index < close_brace.index:
        return "inside a static method"
    return None


def _static_method_body(stream: TokenStream, function: int) -> Optional[Tuple[int, int]]:
  """Brace indices of the body of the method declared at ``function`` when it is static."""
  is_static = False
  prev = stream.prev_significant(function)
  while prev is not None and stream[prev].kind == TokenKind.KEYWORD and stream[prev].text.lower() in _MODIFIERS:
    is_static = is_static or stream[prev].text.lower() == "static"
    prev = stream.prev_significant(prev)
  if not is_static:
    return None

  open_paren = stream.next_index_of_kind(function, TokenKind.SYMBOL, Symbol.LPAREN.value)
  close_paren = stream.find_matching(open_paren) if open_paren is not None else None
  if close_paren is None:
    return None
  # Return types carry no symbols, so the next one opens the body or ends an abstract declaration.
  for i in range(close_paren + 1, len(stream)):
    tok = stream[i]
    if tok.kind != TokenKind.SYMBOL:
      continue
    if tok.text != Symbol.LBRACE.value:
      return None
    close_brace = stream.find_matching(i)
    return (i, close_brace) if close_brace is not None else None
  return None


class MageProcessor:
  """
  Rewrites legacy ``Mage::`` calls in one stream and injects their collaborators.

  Attributes:
      conversions (List[Dict]): Rewritten calls from the last ``process`` run.
      unresolved (List[Dict]): Recognised calls left unchanged.
      injected (List[Dict]): Collaborators handed to the injector.
  """

  def __init__(
    self,
    matcher: Optional[MageFunctionMatcher] = None,
    injector_factory: Optional[Callable[[], Any]] = None,
    conflict_policy: DiConflictPolicy = DiConflictPolicy.LAST_WINS,
    tracer: Optional[TraceLogger] = None,
    file_path: Optional[str] = None,
  ):
    """
    Args:
        matcher: Recogniser for call sites. Built with the default resolver if None.
        injector_factory: Zero-argument builder returning an object with
            ``set_context(stream)`` and ``inject_arguments(requirements)``.
            Defaults to the registered ``constructor_helper``.
        conflict_policy: How a variable required with two different types is settled.
        tracer: Optional trace log receiving phases and events.
        file_path: Source path, attached to raised errors.
    """
    self.matcher = matcher or MageFunctionMatcher()
    self._injector_factory = injector_factory or helper_factory("constructor_helper")
    self.conflict_policy = conflict_policy
    self.tracer = tracer or TraceLogger()
    self.file_path = file_path

    self.conversions: List[Dict[str, object]] = []
    self.unresolved: List[Dict[str, object]] = []
    self.injected: List[Dict[str, str]] = []

  def process(self, stream: TokenStream) -> TokenStream:
    """
    Migrates one file's token stream.

    Args:
        stream: The stream to edit. It is mutated in place while scanning.

    Returns:
        TokenStream: ``stream`` itself when the file declares no class,
        otherwise a freshly tokenized stream of the migrated code.

    Raises:
        InjectorFactoryError: If the injector cannot be built.
        InjectionError: If the collaborators cannot be wired into the class.
        DependencyConflictError: Under the strict conflict policy.
        StaleSpanError: If a match outlives an edit of its stream.
    """
    self.conversions = []
    self.unresolved = []
    self.injected = []

    self.tracer.start_phase("Gate", "Class declaration lookup")
    keyword = find_class_keyword(stream)
    self.tracer.end_phase()
    if keyword is None:
      logger.debug("No class declaration in %s; left unchanged", self.file_path or "<input>")
      return stream

    try:
      requirements = self._scan(stream, _InjectionScope.locate(stream, keyword))
      if requirements:
        self._inject(stream, requirements)
    except MigrationError as e:
      if self.file_path is None or e.file_path:
        raise
      raise e.with_file(self.file_path) from e

    self.tracer.start_phase("Refresh", "Re-tokenize migrated code")
    refreshed = stream.refresh()
    self.tracer.end_phase()
    return refreshed

  def _scan(self, stream: TokenStream, scope: Optional[_InjectionScope]) -> DiRequirements:
    self.tracer.start_phase("Scanning", "Mage:: call sites")
    requirements = DiRequirements(self.conflict_policy)
    self._scan_range(stream, requirements, scope, 0)
    self.tracer.end_phase()
    return requirements

  def _scan_range(
    self,
    stream: TokenStream,
    requirements: DiRequirements,
    scope: Optional[_InjectionScope],
    index: int,
    closer: Optional[Token] = None,
  ) -> None:
    """
    Rewrites the calls found from ``index`` up to ``closer`` (or the end of the stream).

    ``closer`` is held as a token rather than an index because nested
    rewrites move it.
    """
    while index < self._limit(stream, closer):
      found = self.matcher.match(stream, index)
      if found is None:
        index += 1
        continue

      if found.call.args:
        revision = stream.revision
        self._scan_range(stream, requirements, scope, found.call.open_paren + 1, stream[found.call.close_paren])
        if stream.revision != revision:
          found = self.matcher.match(stream, index)

      excluded = scope.exclusion(found.start) if scope is not None and found.di_variable is not None else None
      if excluded:
        found = UnresolvedFunction(
          stream, found.call, reason=f"needs ${found.di_variable.name} but is {excluded}", end=found.end
        )

      if isinstance(found, UnresolvedFunction):
        self.unresolved.append(found.describe())
        self.tracer.log_unresolved(found.legacy_symbol, found.reason, list(found.span))
        logger.info("Unresolved %s at token %d: %s", found.legacy_symbol, found.start, found.reason)
        index = found.end
        continue

      if found.di_variable is not None:
        requirements.add(found.di_variable)
      described = found.describe()
      index = found.convert()
      described["span"] = [found.start, index]
      self.conversions.append(described)
      self.tracer.log_match(found.legacy_symbol, found.resolved_type, described["span"])

  @staticmethod
  def _limit(stream: TokenStream, closer: Optional[Token]) -> int:
    if closer is None:
      return len(stream) - _MIN_CALL_TOKENS
    return closer.index

  def _inject(self, stream: TokenStream, requirements: DiRequirements) -> None:
    self.tracer.start_phase("Injecting", f"{len(requirements)} collaborator(s)")
    try:
      injector = self._injector_factory()
    except InjectorFactoryError:
      raise
    except Exception as e:
      raise InjectorFactoryError(f"Injector factory failed: {e}") from e

    injector.set_context(stream)
    injector.inject_arguments(requirements.as_dict())

    for name in requirements:
      variable = requirements[name]
      self.injected.append(variable.as_dict())
      self.tracer.log_injection(variable.name, variable.type)
    self.tracer.end_phase()
