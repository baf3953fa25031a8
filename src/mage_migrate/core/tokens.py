"""
PHP Token Definitions.

Defines the enumerations for Token Kinds and Symbols used by the Lexer and
the TokenStream utilities.
"""

from enum import Enum


class TokenKind(str, Enum):
  """Enumeration of Lexer Token Types."""

  INLINE_HTML = "INLINE_HTML"
  OPEN_TAG = "OPEN_TAG"
  CLOSE_TAG = "CLOSE_TAG"
  DOC_COMMENT = "DOC_COMMENT"
  COMMENT = "COMMENT"
  WHITESPACE = "WHITESPACE"
  VARIABLE = "VARIABLE"
  STRING = "STRING"
  NUMBER = "NUMBER"
  KEYWORD = "KEYWORD"
  IDENTIFIER = "IDENTIFIER"
  DOUBLE_COLON = "DOUBLE_COLON"
  OBJECT_OPERATOR = "OBJECT_OPERATOR"
  OPERATOR = "OPERATOR"
  SYMBOL = "SYMBOL"
  MISMATCH = "MISMATCH"


class Symbol(str, Enum):
  """Enumeration of Punctuation Symbols."""

  LBRACE = "{"
  RBRACE = "}"
  LPAREN = "("
  RPAREN = ")"
  LBRACKET = "["
  RBRACKET = "]"
  COMMA = ","
  SEMICOLON = ";"


# Tokens carrying no meaning for pattern recognition.
TRIVIA_KINDS = frozenset({TokenKind.WHITESPACE, TokenKind.COMMENT, TokenKind.DOC_COMMENT})

BRACKET_PAIRS = {
  Symbol.LPAREN.value: Symbol.RPAREN.value,
  Symbol.LBRACKET.value: Symbol.RBRACKET.value,
  Symbol.LBRACE.value: Symbol.RBRACE.value,
}

# Reserved words, compared case-insensitively as PHP does.
KEYWORDS = frozenset(
  {
    "abstract",
    "and",
    "array",
    "as",
    "break",
    "callable",
    "case",
    "catch",
    "class",
    "clone",
    "const",
    "continue",
    "declare",
    "default",
    "do",
    "echo",
    "else",
    "elseif",
    "empty",
    "enddeclare",
    "endfor",
    "endforeach",
    "endif",
    "endswitch",
    "endwhile",
    "enum",
    "extends",
    "final",
    "finally",
    "fn",
    "for",
    "foreach",
    "function",
    "global",
    "goto",
    "if",
    "implements",
    "include",
    "include_once",
    "instanceof",
    "insteadof",
    "interface",
    "isset",
    "list",
    "match",
    "namespace",
    "new",
    "or",
    "print",
    "private",
    "protected",
    "public",
    "readonly",
    "require",
    "require_once",
    "return",
    "static",
    "switch",
    "throw",
    "trait",
    "try",
    "unset",
    "use",
    "var",
    "while",
    "xor",
    "yield",
  }
)
