"""
Constructor Dependency Injection.

Wires collaborators into the first class declared in a token stream:

1.  Locates ``__construct`` at class member level, synthesising an empty
    public constructor right after the class opening brace when absent.
2.  Adds one typed parameter per requirement. New parameters go before the
    first optional or variadic parameter, otherwise at the end, following
    the existing single-line or one-per-line layout.
3.  Appends ``$this->name = $name;`` to the constructor body.
4.  Declares ``protected $name;`` with a ``@var`` docblock at the top of the
    class body.

Parameters, assignments and properties that already exist are left alone,
as are constructor-promoted parameters. Every step re-locates the class and
constructor because each edit invalidates earlier indices.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Set

from mage_migrate.core.errors import InjectionError
from mage_migrate.core.mage.requirements import DiVariable
from mage_migrate.core.registry import register_helper
from mage_migrate.core.token_stream import TokenStream, find_class_keyword
from mage_migrate.core.tokens import Symbol, TokenKind

logger = logging.getLogger(__name__)

CONSTRUCTOR = "__construct"
INDENT = "    "
PROMOTION_MODIFIERS = frozenset({"public", "protected", "private", "readonly"})


@dataclass
class _ClassBody:
  keyword: int
  open_brace: int
  close_brace: int


@dataclass
class _Constructor:
  function: int
  open_paren: int
  close_paren: int
  open_brace: int
  close_brace: int


@register_helper("constructor_helper")
class ConstructorHelper:
  """
  Dependency injector operating on a single token stream.

  Usage::

      helper = ConstructorHelper().set_context(stream)
      helper.inject_arguments({"logger": DiVariable("logger", logger_type)})
  """

  def __init__(self) -> None:
    self.stream: Optional[TokenStream] = None

  def set_context(self, stream: TokenStream) -> "ConstructorHelper":
    self.stream = stream
    return self

  def inject_arguments(self, requirements: Mapping[str, DiVariable]) -> None:
    """
    Adds one constructor parameter, assignment and property per requirement.

    Args:
        requirements: Variable name -> DI variable, in injection order.

    Raises:
        InjectionError: If no stream was set, or the class body or its
            constructor cannot be located or extended.
    """
    if self.stream is None:
      raise InjectionError("No token stream set; call set_context() first")
    variables = list(requirements.values())
    if not variables:
      return

    ctor = self._locate_constructor(self._locate_class())
    if ctor is None:
      self._create_constructor(self._locate_class())
      ctor = self._require_constructor()

    promoted = self._promoted_parameters(ctor)
    pending = [v for v in variables if v.name not in promoted]

    self._append_parameters(ctor, pending)
    self._append_assignments(self._require_constructor(), pending)
    self._declare_properties(self._locate_class(), pending)

  # --- Location ---

  def _locate_class(self) -> _ClassBody:
    stream = self.stream
    keyword = find_class_keyword(stream)
    if keyword is None:
      raise InjectionError("No class declaration found")
    open_brace = stream.next_index_of_kind(keyword, TokenKind.SYMBOL, Symbol.LBRACE.value)
    if open_brace is None:
      raise InjectionError("Class declaration has no body", span=(keyword, keyword + 1))
    close_brace = stream.find_matching(open_brace)
    if close_brace is None:
      raise InjectionError("Class body is not closed", span=(keyword, open_brace + 1))
    return _ClassBody(keyword, open_brace, close_brace)

  def _locate_constructor(self, body: _ClassBody) -> Optional[_Constructor]:
    stream = self.stream
    for i in self._member_level_indices(body):
      tok = stream[i]
      if tok.kind != TokenKind.KEYWORD or tok.text.lower() != "function":
        continue
      name = stream.next_significant(i)
      if name is not None and stream[name].text == "&":
        name = stream.next_significant(name)
      if name is None or stream[name].text.lower() != CONSTRUCTOR:
        continue

      open_paren = stream.next_significant(name)
      close_paren = stream.find_matching(open_paren) if stream.is_symbol(open_paren, "(") else None
      if close_paren is None:
        raise InjectionError("Constructor parameter list is malformed", span=(i, name + 1), pattern=CONSTRUCTOR)
      open_brace = stream.next_significant(close_paren)
      if not stream.is_symbol(open_brace, Symbol.LBRACE.value):
        raise InjectionError("Constructor has no body (abstract?)", span=(i, close_paren + 1), pattern=CONSTRUCTOR)
      close_brace = stream.find_matching(open_brace)
      if close_brace is None:
        raise InjectionError("Constructor body is not closed", span=(i, open_brace + 1), pattern=CONSTRUCTOR)
      return _Constructor(i, open_paren, close_paren, open_brace, close_brace)
    return None

  def _require_constructor(self) -> _Constructor:
    ctor = self._locate_constructor(self._locate_class())
    if ctor is None:
      raise InjectionError("Constructor disappeared after synthesis", pattern=CONSTRUCTOR)
    return ctor

  def _member_level_indices(self, body: _ClassBody) -> List[int]:
    """Indices directly inside the class body: not in method bodies or parentheses."""
    stream = self.stream
    indices = []
    depth = 0
    for i in range(body.open_brace + 1, body.close_brace):
      tok = stream[i]
      if tok.kind == TokenKind.SYMBOL:
        if tok.text in "{(":
          depth += 1
          continue
        if tok.text in "})":
          depth -= 1
          continue
      if depth == 0:
        indices.append(i)
    return indices

  def _member_indent(self, body: _ClassBody) -> str:
    first = self.stream.next_significant(body.open_brace)
    if first is not None and first < body.close_brace:
      indent = self.stream.line_indent(first)
      if indent:
        return indent
    return self.stream.line_indent(body.keyword) + INDENT

  def _promoted_parameters(self, ctor: _Constructor) -> Set[str]:
    stream = self.stream
    promoted = set()
    for start, end in stream.split_arguments(ctor.open_paren, ctor.close_paren):
      param = stream.window(start, end)
      if any(t.kind == TokenKind.KEYWORD and t.text.lower() in PROMOTION_MODIFIERS for t in param):
        promoted.update(t.text[1:] for t in param if t.kind == TokenKind.VARIABLE)
    return promoted

  # --- Edits ---

  def _create_constructor(self, body: _ClassBody) -> None:
    indent = self._member_indent(body)
    logger.debug("Synthesising constructor after token %d", body.open_brace)
    self.stream.insert(body.open_brace + 1, f"\n{indent}public function {CONSTRUCTOR}() {{\n{indent}}}\n")

  def _append_parameters(self, ctor: _Constructor, variables: List[DiVariable]) -> None:
    stream = self.stream
    params = stream.split_arguments(ctor.open_paren, ctor.close_paren)
    existing = {t.text[1:] for s, e in params for t in stream.window(s, e) if t.kind == TokenKind.VARIABLE}
    new = [f"{v.type} ${v.name}" for v in variables if v.name not in existing]
    if not new:
      return

    member_indent = stream.line_indent(ctor.function)
    if not params:
      param_indent = member_indent + INDENT
      text = "\n" + ",\n".join(param_indent + p for p in new) + "\n" + member_indent
      stream.replace_span(ctor.open_paren + 1, ctor.close_paren, text)
      return

    multiline = "\n" in stream.render(ctor.open_paren, ctor.close_paren)
    sep = "\n" + stream.line_indent(params[0][0]) if multiline else " "

    optional = self._first_optional_parameter(params)
    if optional is not None:
      stream.insert(optional, "".join(f"{p},{sep}" for p in new))
      return

    last = stream.prev_significant(ctor.close_paren)
    if stream.is_symbol(last, Symbol.COMMA.value):
      text = "".join(f"{sep}{p}," for p in new)
    else:
      text = "".join(f",{sep}{p}" for p in new)
    stream.insert(last + 1, text)

  def _first_optional_parameter(self, params) -> Optional[int]:
    for start, end in params:
      for tok in self.stream.window(start, end):
        if tok.kind == TokenKind.OPERATOR and tok.text in ("=", "..."):
          return start
    return None

  def _append_assignments(self, ctor: _Constructor, variables: List[DiVariable]) -> None:
    stream = self.stream
    assigned = self._assigned_properties(ctor)
    new = [v for v in variables if v.name not in assigned]
    if not new:
      return

    member_indent = stream.line_indent(ctor.function)
    last = stream.prev_significant(ctor.close_brace)
    if last == ctor.open_brace:
      stmt_indent = member_indent + INDENT
    else:
      stmt_indent = stream.line_indent(stream.next_significant(ctor.open_brace))
      if len(stmt_indent) <= len(member_indent):
        stmt_indent = member_indent + INDENT

    text = "".join(f"\n{stmt_indent}$this->{v.name} = ${v.name};" for v in new)
    if "\n" in stream.render(last + 1, ctor.close_brace):
      stream.insert(last + 1, text)
    else:
      stream.replace_span(last + 1, ctor.close_brace, text + "\n" + member_indent)

  def _assigned_properties(self, ctor: _Constructor) -> Set[str]:
    stream = self.stream
    assigned = set()
    for i in range(ctor.open_brace + 1, ctor.close_brace):
      if stream[i].kind != TokenKind.VARIABLE or stream[i].text != "$this":
        continue
      arrow = stream.next_significant(i)
      if arrow is None or stream[arrow].kind != TokenKind.OBJECT_OPERATOR:
        continue
      name = stream.next_significant(arrow)
      op = stream.next_significant(name) if name is not None else None
      if op is not None and stream[op].kind == TokenKind.OPERATOR and stream[op].text == "=":
        assigned.add(stream[name].text)
    return assigned

  def _declare_properties(self, body: _ClassBody, variables: List[DiVariable]) -> None:
    stream = self.stream
    declared = {stream[i].text[1:] for i in self._member_level_indices(body) if stream[i].kind == TokenKind.VARIABLE}
    new = [v for v in variables if v.name not in declared]
    if not new:
      return

    indent = self._member_indent(body)
    text = "".join(
      f"\n{indent}/**\n{indent} * @var {v.type}\n{indent} */\n{indent}protected ${v.name};\n" for v in new
    )
    stream.insert(body.open_brace + 1, text)
