"""
Legacy Call Matcher.

Recognises ``Mage::method(...)`` invocations at a fixed token index.

The catalog is a closed, ordered tuple of ``MageFunction`` variants. Each
variant owns exactly one method name, so at most one variant claims a call
site; the order still defines precedence should two ever overlap (first
match wins). A call site on ``Mage`` that no variant claims is reported as
an ``UnresolvedFunction``.
"""

from typing import Optional, Tuple, Type

from mage_migrate.core.mage.functions import (
  AppStoreManager,
  CallSite,
  DispatchEvent,
  GetBaseDir,
  GetBaseUrl,
  GetModel,
  GetResourceModel,
  GetResourceSingleton,
  GetSingleton,
  GetStoreConfig,
  GetStoreConfigFlag,
  GetUrl,
  GetVersion,
  Helper,
  IsDeveloperMode,
  Log,
  LogException,
  MageFunction,
  Register,
  Registry,
  ThrowException,
  UnresolvedFunction,
  Unregister,
)
from mage_migrate.core.token_stream import TokenStream
from mage_migrate.core.tokens import Symbol, TokenKind
from mage_migrate.mapping import ClassResolver

LEGACY_CLASS = "mage"

CATALOG: Tuple[Type[MageFunction], ...] = (
  GetModel,
  GetSingleton,
  GetResourceModel,
  GetResourceSingleton,
  Helper,
  GetStoreConfigFlag,
  GetStoreConfig,
  DispatchEvent,
  LogException,
  Log,
  Registry,
  Register,
  Unregister,
  AppStoreManager,
  GetBaseUrl,
  GetUrl,
  GetBaseDir,
  ThrowException,
  GetVersion,
  IsDeveloperMode,
)


class MageFunctionMatcher:
  """
  Pure recogniser for legacy ``Mage::`` calls.

  ``match`` never mutates the stream; rewriting happens only when the caller
  invokes ``convert()`` on the returned descriptor.
  """

  def __init__(self, resolver: Optional[ClassResolver] = None, catalog: Tuple[Type[MageFunction], ...] = CATALOG):
    self.resolver = resolver or ClassResolver.load()
    self.catalog = catalog

  def match(self, stream: TokenStream, index: int) -> Optional[MageFunction]:
    """
    Attempts to recognise a legacy call starting exactly at ``index``.

    Args:
        stream: Token stream of the file.
        index: Index of the candidate ``Mage`` token.

    Returns:
        Optional[MageFunction]: The descriptor, or None when no call starts here.
    """
    call = self.locate_call(stream, index)
    if call is None:
      return None
    for variant in self.catalog:
      found = variant.match(stream, call, self.resolver)
      if found is not None:
        return found
    return UnresolvedFunction(stream, call, reason=f"unsupported method Mage::{call.method}")

  @staticmethod
  def locate_call(stream: TokenStream, index: int) -> Optional[CallSite]:
    """Parses ``Mage :: name ( ... )`` at ``index`` into a ``CallSite``."""
    tok = stream[index]
    if tok.kind != TokenKind.IDENTIFIER or tok.text.lstrip("\\").lower() != LEGACY_CLASS:
      return None

    # ``$obj->Mage`` and ``Foo::Mage`` are members, not the facade.
    prev = stream.prev_significant(index)
    if prev is not None and stream[prev].kind in (TokenKind.OBJECT_OPERATOR, TokenKind.DOUBLE_COLON):
      return None

    colon = stream.next_significant(index)
    if colon is None or stream[colon].kind != TokenKind.DOUBLE_COLON:
      return None
    name = stream.next_significant(colon)
    if name is None or stream[name].kind not in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
      return None
    open_paren = stream.next_significant(name)
    if not stream.is_symbol(open_paren, Symbol.LPAREN.value):
      return None
    close_paren = stream.find_matching(open_paren)
    if close_paren is None:
      return None

    return CallSite(
      start=index,
      method=stream[name].text,
      open_paren=open_paren,
      close_paren=close_paren,
      args=stream.split_arguments(open_paren, close_paren),
    )
