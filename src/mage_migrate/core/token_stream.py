"""
Mutable Token Stream.

Holds the token sequence of one file and offers the indexed scanning and span
editing primitives used by the matcher, the rewrite strategies and the
constructor injector.

Index contract:
    Indices are contiguous ``0..N-1`` at all times. Every edit renumbers the
    tail of the stream and bumps ``revision``; any index computed before an
    edit is stale and must be recomputed (or replaced by the index returned
    from the edit) before scanning resumes.
"""

from typing import Iterator, List, Optional, Tuple, Union

from mage_migrate.core.lexer import Token, tokenize
from mage_migrate.core.tokens import BRACKET_PAIRS, TRIVIA_KINDS, TokenKind


class TokenStream:
  """
  Ordered, mutable sequence of tokens for a single source file.

  Attributes:
      revision (int): Incremented on every edit.
  """

  def __init__(self, tokens: List[Token]):
    self._tokens: List[Token] = list(tokens)
    self.revision = 0
    self._renumber(0)

  @classmethod
  def from_source(cls, code: str) -> "TokenStream":
    """Tokenizes a complete PHP file."""
    return cls(tokenize(code))

  def __len__(self) -> int:
    return len(self._tokens)

  def __getitem__(self, index: int) -> Token:
    return self._tokens[index]

  def __iter__(self) -> Iterator[Token]:
    return iter(self._tokens)

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, TokenStream):
      return NotImplemented
    return [(t.kind, t.text) for t in self._tokens] == [(t.kind, t.text) for t in other._tokens]

  @property
  def tokens(self) -> List[Token]:
    """A shallow copy of the current token list."""
    return list(self._tokens)

  def window(self, start: int, end: int) -> List[Token]:
    """Tokens in ``[start, end)``."""
    return self._tokens[start:end]

  def render(self, start: int = 0, end: Optional[int] = None) -> str:
    """Concatenates token text over ``[start, end)``."""
    return "".join(t.text for t in self._tokens[start:end])

  # --- Scanning ---

  def next_index_of_kind(self, from_index: int, kind: TokenKind, text: Optional[str] = None) -> Optional[int]:
    """
    Forward scan for the first token of ``kind`` at or after ``from_index``.

    Args:
        from_index: First index to inspect.
        kind: Token kind to look for.
        text: Optional case-insensitive text the token must also carry.

    Returns:
        Optional[int]: The index, or None when no such token exists.
    """
    wanted = text.lower() if text is not None else None
    for i in range(max(from_index, 0), len(self._tokens)):
      tok = self._tokens[i]
      if tok.kind == kind and (wanted is None or tok.text.lower() == wanted):
        return i
    return None

  def next_significant(self, index: int) -> Optional[int]:
    """Returns the first non-trivia index strictly after ``index``."""
    for i in range(index + 1, len(self._tokens)):
      if self._tokens[i].kind not in TRIVIA_KINDS:
        return i
    return None

  def prev_significant(self, index: int) -> Optional[int]:
    """Returns the last non-trivia index strictly before ``index``."""
    for i in range(min(index, len(self._tokens)) - 1, -1, -1):
      if self._tokens[i].kind not in TRIVIA_KINDS:
        return i
    return None

  def is_symbol(self, index: Optional[int], symbol: str) -> bool:
    if index is None or not 0 <= index < len(self._tokens):
      return False
    tok = self._tokens[index]
    return tok.kind == TokenKind.SYMBOL and tok.text == symbol

  def find_matching(self, index: int) -> Optional[int]:
    """
    Finds the bracket closing the one opened at ``index``.

    Brackets inside strings and comments belong to those tokens and are
    therefore ignored.

    Returns:
        Optional[int]: Index of the closing bracket, or None if unbalanced.
    """
    opener = self._tokens[index].text
    closer = BRACKET_PAIRS.get(opener)
    if closer is None or self._tokens[index].kind != TokenKind.SYMBOL:
      return None
    depth = 0
    for i in range(index, len(self._tokens)):
      tok = self._tokens[i]
      if tok.kind != TokenKind.SYMBOL:
        continue
      if tok.text == opener:
        depth += 1
      elif tok.text == closer:
        depth -= 1
        if depth == 0:
          return i
    return None

  def split_arguments(self, open_paren: int, close_paren: int) -> List[Tuple[int, int]]:
    """
    Splits the tokens between a pair of parentheses on top-level commas.

    Works for call arguments and parameter lists alike.

    Returns:
        List[Tuple[int, int]]: ``[start, end)`` per item with surrounding
        trivia trimmed. Empty for ``()``.
    """
    spans = []
    depth = 0
    item_start = open_paren + 1
    for i in range(open_paren + 1, close_paren + 1):
      tok = self._tokens[i]
      is_comma = depth == 0 and tok.kind == TokenKind.SYMBOL and tok.text == ","
      if i == close_paren or is_comma:
        span = self._trim(item_start, i)
        if span is not None:
          spans.append(span)
        item_start = i + 1
        continue
      if tok.kind == TokenKind.SYMBOL:
        if tok.text in BRACKET_PAIRS:
          depth += 1
        elif tok.text in BRACKET_PAIRS.values():
          depth -= 1
    return spans

  def _trim(self, start: int, end: int) -> Optional[Tuple[int, int]]:
    while start < end and self._tokens[start].kind in TRIVIA_KINDS:
      start += 1
    while end > start and self._tokens[end - 1].kind in TRIVIA_KINDS:
      end -= 1
    if start == end:
      return None
    return (start, end)

  def line_indent(self, index: int) -> str:
    """
    Returns the indentation of the line holding token ``index``.

    Looks backwards for the nearest newline in preceding tokens and returns
    the horizontal whitespace that follows it.
    """
    for i in range(index - 1, -1, -1):
      text = self._tokens[i].text
      if "\n" in text:
        tail = text.rsplit("\n", 1)[1]
        if self._tokens[i].kind == TokenKind.WHITESPACE:
          return tail
        return ""
    return ""

  # --- Editing ---

  def replace_span(self, start: int, end: int, replacement: Union[str, List[Token]]) -> int:
    """
    Replaces tokens ``[start, end)`` with ``replacement``.

    Args:
        start: First index to replace.
        end: Index one past the last replaced token.
        replacement: Code fragment (tokenized in PHP mode) or token list.

    Returns:
        int: The index just past the inserted tokens.
    """
    if not 0 <= start <= end <= len(self._tokens):
      raise IndexError(f"Invalid span [{start}, {end}) for stream of length {len(self._tokens)}")
    new_tokens = tokenize(replacement, inline=True) if isinstance(replacement, str) else list(replacement)
    self._tokens[start:end] = new_tokens
    self.revision += 1
    self._renumber(start)
    return start + len(new_tokens)

  def insert(self, index: int, text: str) -> int:
    """Inserts a code fragment before ``index``. Returns the index past it."""
    return self.replace_span(index, index, text)

  def refresh(self) -> "TokenStream":
    """
    Re-tokenizes the rendered text into a new canonical stream.

    Fragments spliced in by edits were tokenized in isolation; refreshing
    re-derives kinds and line numbers from the file as a whole.
    """
    return TokenStream(tokenize(self.render()))

  def _renumber(self, start: int) -> None:
    for i in range(start, len(self._tokens)):
      self._tokens[i].index = i


def next_index_of_kind(stream: TokenStream, from_index: int, kind: TokenKind, text: Optional[str] = None) -> Optional[int]:
  """Functional form of :meth:`TokenStream.next_index_of_kind`."""
  return stream.next_index_of_kind(from_index, kind, text)


def refresh(stream: TokenStream) -> TokenStream:
  """Functional form of :meth:`TokenStream.refresh`."""
  return stream.refresh()


def find_class_keyword(stream: TokenStream, from_index: int = 0) -> Optional[int]:
  """
  Locates the ``class`` keyword of a named class declaration.

  Skips the ``Foo::class`` constant and anonymous ``new class`` expressions.

  Returns:
      Optional[int]: Index of the keyword, or None for files without a class.
  """
  index = stream.next_index_of_kind(from_index, TokenKind.KEYWORD, "class")
  while index is not None:
    prev = stream.prev_significant(index)
    prev_tok = stream[prev] if prev is not None else None
    is_constant = prev_tok is not None and prev_tok.kind == TokenKind.DOUBLE_COLON
    is_anonymous = prev_tok is not None and prev_tok.text.lower() == "new"
    if not is_constant and not is_anonymous:
      return index
    index = stream.next_index_of_kind(index + 1, TokenKind.KEYWORD, "class")
  return None
