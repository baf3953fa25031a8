"""
PHP Lexer.

Splits PHP source text into a flat, lossless list of tokens: concatenating the
``text`` of every token reproduces the input byte-for-byte. Markup outside of
``<?php ... ?>`` blocks is kept as ``INLINE_HTML``.

The lexer only classifies what the migration passes need to recognise
(variables, strings, qualified names, operators and punctuation). It does not
validate the grammar.
"""

import re
from dataclasses import dataclass
from typing import Generator, List

from mage_migrate.core.errors import TokenizeError
from mage_migrate.core.tokens import KEYWORDS, TRIVIA_KINDS, TokenKind


@dataclass
class Token:
  kind: TokenKind
  text: str
  index: int = 0
  line: int = 0


_NAME = r"[^\W\d]\w*"

_OPERATORS = (
  r"<=>|\*\*=|\.\.\.|<<=|>>=|===|!==|\?\?=|\+\+|--|==|!=|<>|<=|>=|&&|\|\||\?\?"
  r"|\+=|-=|\*=|/=|\.=|%=|&=|\|=|\^=|<<|>>|=>|\*\*|[+\-*/%=<>!.&|^~?:@]"
)


class Tokenizer:
  PATTERN_DEFS = [
    (TokenKind.CLOSE_TAG, r"\?>(?:\r?\n)?"),
    (TokenKind.DOC_COMMENT, r"/\*\*\s[\s\S]*?\*/"),
    (TokenKind.COMMENT, r"/\*[\s\S]*?\*/|(?://|#)(?:[^\r\n?]|\?(?!>))*"),
    (TokenKind.WHITESPACE, r"\s+"),
    (TokenKind.VARIABLE, rf"\${_NAME}"),
    (
      TokenKind.STRING,
      rf"<<<[ \t]*(?P<hd_quote>[\"']?)(?P<hd_label>{_NAME})(?P=hd_quote)\r?\n[\s\S]*?^[ \t]*(?P=hd_label)\b"
      r"|'(?:[^'\\]|\\[\s\S])*'"
      r'|"(?:[^"\\]|\\[\s\S])*"'
      r"|`(?:[^`\\]|\\[\s\S])*`",
    ),
    (
      TokenKind.NUMBER,
      r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?|\.\d[\d_]*(?:[eE][+-]?\d+)?",
    ),
    (TokenKind.DOUBLE_COLON, r"::"),
    (TokenKind.OBJECT_OPERATOR, r"\?->|->"),
    (TokenKind.IDENTIFIER, rf"\\?{_NAME}(?:\\{_NAME})*"),
    (TokenKind.OPERATOR, _OPERATORS),
    (TokenKind.SYMBOL, r"[(){}\[\],;$\\]"),
    (TokenKind.MISMATCH, r"[\s\S]"),
  ]

  _REGEX = re.compile(
    "|".join(f"(?P<{kind.value}>{pattern})" for kind, pattern in PATTERN_DEFS),
    re.MULTILINE,
  )
  _OPEN_TAG = re.compile(r"<\?php(?:\r\n|\s|$)|<\?=", re.IGNORECASE)

  def __init__(self, text: str, inline: bool = False):
    """
    Args:
        text: Source text.
        inline: Start in PHP mode instead of markup mode. Used for code
            fragments that carry no ``<?php`` tag.
    """
    self.text = text
    self.inline = inline

  def tokenize(self) -> Generator[Token, None, None]:
    text = self.text
    pos = 0
    line = 1
    in_php = self.inline
    prev_significant = None

    while pos < len(text):
      if not in_php:
        tag = self._OPEN_TAG.search(text, pos)
        end = tag.start() if tag else len(text)
        if end > pos:
          yield Token(TokenKind.INLINE_HTML, text[pos:end], line=line)
          line += text.count("\n", pos, end)
        if tag:
          yield Token(TokenKind.OPEN_TAG, tag.group(), line=line)
          line += tag.group().count("\n")
          in_php = True
          pos = tag.end()
        else:
          pos = end
        continue

      mo = self._REGEX.match(text, pos)
      kind = TokenKind(mo.lastgroup)
      value = mo.group()

      if kind == TokenKind.MISMATCH:
        raise TokenizeError(f"Unexpected character {value!r} on line {line}")

      if kind == TokenKind.IDENTIFIER and self._is_keyword(value, prev_significant):
        kind = TokenKind.KEYWORD

      yield Token(kind, value, line=line)

      line += value.count("\n")
      pos = mo.end()
      if kind == TokenKind.CLOSE_TAG:
        in_php = False
        prev_significant = None
      elif kind not in TRIVIA_KINDS:
        prev_significant = kind

  @staticmethod
  def _is_keyword(value: str, prev_significant) -> bool:
    lowered = value.lower()
    if lowered not in KEYWORDS:
      return False
    # Member names may reuse reserved words, except the ``Foo::class`` constant.
    if prev_significant == TokenKind.OBJECT_OPERATOR:
      return False
    if prev_significant == TokenKind.DOUBLE_COLON:
      return lowered == "class"
    return True


def tokenize(text: str, inline: bool = False) -> List[Token]:
  """
  Tokenizes text into a list with contiguous ``index`` values starting at 0.

  Args:
      text: PHP source (or a bare code fragment when ``inline`` is True).
      inline: Treat the text as code without an opening ``<?php`` tag.

  Returns:
      List[Token]: The lossless token sequence.

  Raises:
      TokenizeError: If a character cannot be classified.
  """
  tokens = list(Tokenizer(text, inline=inline).tokenize())
  for i, tok in enumerate(tokens):
    tok.index = i
  return tokens
