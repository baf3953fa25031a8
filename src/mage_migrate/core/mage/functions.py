"""
Recognised Legacy Invocations.

Each ``MageFunction`` subclass handles one ``Mage::`` call shape. Instances
are produced by ``MageFunctionMatcher`` and describe a matched span without
touching the stream; ``convert()`` then rewrites the span in place.

Two families exist:

- **Alias functions** (``getModel``, ``getSingleton``, ``helper``...) resolve
  their literal alias argument to an M2 class and inject that class (or its
  generated factory).
- **Service functions** (``getStoreConfig``, ``log``, ``register``...) forward
  their arguments to a well-known M2 service with a fixed property name.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

from mage_migrate.core.errors import StaleSpanError
from mage_migrate.core.lexer import Token
from mage_migrate.core.mage.requirements import DiVariable, variable_name_for
from mage_migrate.core.token_stream import TokenStream
from mage_migrate.core.tokens import TokenKind
from mage_migrate.mapping import AliasKind, ClassResolver


class MageFunctionKind(str, Enum):
  GET_MODEL = "getModel"
  GET_SINGLETON = "getSingleton"
  GET_RESOURCE_MODEL = "getResourceModel"
  GET_RESOURCE_SINGLETON = "getResourceSingleton"
  HELPER = "helper"
  GET_STORE_CONFIG_FLAG = "getStoreConfigFlag"
  GET_STORE_CONFIG = "getStoreConfig"
  DISPATCH_EVENT = "dispatchEvent"
  LOG_EXCEPTION = "logException"
  LOG = "log"
  REGISTRY = "registry"
  REGISTER = "register"
  UNREGISTER = "unregister"
  APP_STORE_MANAGER = "app"
  GET_BASE_URL = "getBaseUrl"
  GET_URL = "getUrl"
  GET_BASE_DIR = "getBaseDir"
  THROW_EXCEPTION = "throwException"
  GET_VERSION = "getVersion"
  IS_DEVELOPER_MODE = "getIsDeveloperMode"
  UNRESOLVED = "unresolved"


@dataclass
class CallSite:
  """
  The generic ``Mage :: method ( args )`` shape located by the matcher.

  Attributes:
      start: Index of the ``Mage`` token.
      method: Method name as written in the source.
      open_paren: Index of ``(``.
      close_paren: Index of the matching ``)``.
      args: ``[start, end)`` spans of each argument, trivia trimmed.
  """

  start: int
  method: str
  open_paren: int
  close_paren: int
  args: List[Tuple[int, int]]

  @property
  def end(self) -> int:
    return self.close_paren + 1


def string_literal(tokens: List[Token]) -> Optional[str]:
  """
  Returns the value of a constant string literal argument.

  Double-quoted strings qualify only without interpolation.
  """
  if len(tokens) != 1 or tokens[0].kind != TokenKind.STRING:
    return None
  text = tokens[0].text
  quote = text[:1]
  if quote not in ("'", '"') or len(text) < 2:
    return None
  body = text[1:-1]
  if quote == '"' and "$" in body:
    return None
  return body.replace("\\" + quote, quote).replace("\\\\", "\\")


class MageFunction:
  """
  A matched legacy invocation.

  Attributes:
      kind: Catalog entry that produced the match.
      stream: Stream the span refers to.
      call: The located call site.
      start, end: Matched span ``[start, end)``.
      resolved_type: Modern class the call resolves to, if any.
      di_variable: Collaborator the enclosing class must receive, if any.
  """

  kind: ClassVar[MageFunctionKind]
  arity: ClassVar[Tuple[int, int]] = (0, 0)

  def __init__(
    self,
    stream: TokenStream,
    call: CallSite,
    end: Optional[int] = None,
    resolved_type: Optional[str] = None,
    di_variable: Optional[DiVariable] = None,
  ):
    self.stream = stream
    self.call = call
    self.start = call.start
    self.end = call.end if end is None else end
    self.resolved_type = resolved_type
    self.di_variable = di_variable
    self._revision = stream.revision

  @classmethod
  def match(cls, stream: TokenStream, call: CallSite, resolver: ClassResolver) -> Optional["MageFunction"]:
    """Builds an instance when ``call`` has this variant's shape, else None."""
    if call.method.lower() != cls.kind.value.lower():
      return None
    if not cls.arity[0] <= len(call.args) <= cls.arity[1]:
      return UnresolvedFunction(stream, call, reason=f"unsupported argument count {len(call.args)}")
    return cls._build(stream, call, resolver)

  @classmethod
  def _build(cls, stream: TokenStream, call: CallSite, resolver: ClassResolver) -> Optional["MageFunction"]:
    return cls(stream, call)

  @property
  def legacy_symbol(self) -> str:
    return f"Mage::{self.call.method}"

  @property
  def span(self) -> Tuple[int, int]:
    return (self.start, self.end)

  @property
  def di_variable_name(self) -> Optional[str]:
    return self.di_variable.name if self.di_variable else None

  def arg_text(self, i: int) -> str:
    start, end = self.call.args[i]
    return self.stream.render(start, end)

  def args_text(self) -> str:
    """Argument list exactly as written, without the parentheses."""
    return self.stream.render(self.call.open_paren + 1, self.call.close_paren)

  def replacement(self) -> str:
    raise NotImplementedError

  def convert(self) -> int:
    """
    Rewrites the matched span into its modern form.

    Returns:
        int: Index just past the rewritten span; scanning resumes there.

    Raises:
        StaleSpanError: If the stream was edited after this match was made.
    """
    if self.stream.revision != self._revision:
      raise StaleSpanError("Stream changed since match", span=self.span, pattern=self.legacy_symbol)
    new_end = self.stream.replace_span(self.start, self.end, self.replacement())
    self.end = new_end
    self._revision = self.stream.revision
    return new_end

  def describe(self) -> Dict[str, object]:
    return {
      "legacy_symbol": self.legacy_symbol,
      "kind": self.kind.value,
      "resolved_type": self.resolved_type,
      "di_variable": self.di_variable.as_dict() if self.di_variable else None,
      "span": list(self.span),
    }


class UnresolvedFunction(MageFunction):
  """
  A recognised call that cannot be mapped. Converting it is a no-op.
  """

  kind = MageFunctionKind.UNRESOLVED

  def __init__(self, stream: TokenStream, call: CallSite, reason: str, end: Optional[int] = None):
    super().__init__(stream, call, end=end)
    self.reason = reason

  def convert(self) -> int:
    return self.end

  def describe(self) -> Dict[str, object]:
    described = super().describe()
    described["reason"] = self.reason
    return described


# --- Alias functions ---


class AliasFunction(MageFunction):
  alias_kind: ClassVar[AliasKind] = AliasKind.MODEL
  factory: ClassVar[bool] = False
  arity = (1, 1)

  @classmethod
  def _build(cls, stream, call, resolver):
    start, end = call.args[0]
    alias = string_literal(stream.window(start, end))
    if alias is None:
      return UnresolvedFunction(stream, call, reason="class alias is not a string literal")

    m2_class = resolver.resolve(alias, cls.alias_kind)
    if m2_class is None:
      return UnresolvedFunction(stream, call, reason=f"no Magento 2 class for '{alias}'")

    # Interfaces are injected directly; concrete classes through their factory.
    injected = m2_class
    if cls.factory and not m2_class.endswith("Interface"):
      injected = m2_class + "Factory"
    variable = DiVariable(variable_name_for(injected), injected)
    return cls(stream, call, resolved_type=injected, di_variable=variable)

  def replacement(self) -> str:
    target = f"$this->{self.di_variable.name}"
    if not self.resolved_type.endswith("Factory"):
      return target
    if len(self.call.args) > 1:
      return f"{target}->create(['data' => {self.arg_text(1)}])"
    return f"{target}->create()"


class GetModel(AliasFunction):
  kind = MageFunctionKind.GET_MODEL
  factory = True
  arity = (1, 2)


class GetSingleton(AliasFunction):
  kind = MageFunctionKind.GET_SINGLETON


class GetResourceModel(AliasFunction):
  kind = MageFunctionKind.GET_RESOURCE_MODEL
  alias_kind = AliasKind.RESOURCE_MODEL
  factory = True
  arity = (1, 2)


class GetResourceSingleton(AliasFunction):
  kind = MageFunctionKind.GET_RESOURCE_SINGLETON
  alias_kind = AliasKind.RESOURCE_MODEL


class Helper(AliasFunction):
  kind = MageFunctionKind.HELPER
  alias_kind = AliasKind.HELPER


# --- Service functions ---


class ServiceFunction(MageFunction):
  """Forwards the call to a fixed, constructor-injected service."""

  service_name: ClassVar[str]
  service_type: ClassVar[str]

  @classmethod
  def _build(cls, stream, call, resolver):
    variable = DiVariable(cls.service_name, cls.service_type)
    return cls(stream, call, resolved_type=cls.service_type, di_variable=variable)

  @property
  def service(self) -> str:
    return f"$this->{self.service_name}"

  def forward(self, method: str) -> str:
    return f"{self.service}->{method}({self.args_text()})"


class _ScopeConfigFunction(ServiceFunction):
  service_name = "scopeConfig"
  service_type = "\\Magento\\Framework\\App\\Config\\ScopeConfigInterface"
  arity = (1, 2)
  target_method: ClassVar[str]

  def replacement(self) -> str:
    args = [self.arg_text(0), "\\Magento\\Store\\Model\\ScopeInterface::SCOPE_STORE"]
    if len(self.call.args) > 1:
      args.append(self.arg_text(1))
    return f"{self.service}->{self.target_method}({', '.join(args)})"


class GetStoreConfigFlag(_ScopeConfigFunction):
  kind = MageFunctionKind.GET_STORE_CONFIG_FLAG
  target_method = "isSetFlag"


class GetStoreConfig(_ScopeConfigFunction):
  kind = MageFunctionKind.GET_STORE_CONFIG
  target_method = "getValue"


class DispatchEvent(ServiceFunction):
  kind = MageFunctionKind.DISPATCH_EVENT
  service_name = "eventManager"
  service_type = "\\Magento\\Framework\\Event\\ManagerInterface"
  arity = (1, 2)

  def replacement(self) -> str:
    return self.forward("dispatch")


class _LoggerFunction(ServiceFunction):
  service_name = "logger"
  service_type = "\\Psr\\Log\\LoggerInterface"


class LogException(_LoggerFunction):
  kind = MageFunctionKind.LOG_EXCEPTION
  arity = (1, 1)

  def replacement(self) -> str:
    return f"{self.service}->critical({self.arg_text(0)})"


ZEND_LOG_LEVELS = {
  "0": "emergency",
  "1": "alert",
  "2": "critical",
  "3": "error",
  "4": "warning",
  "5": "notice",
  "6": "info",
  "7": "debug",
  "emerg": "emergency",
  "alert": "alert",
  "crit": "critical",
  "err": "error",
  "warn": "warning",
  "notice": "notice",
  "info": "info",
  "debug": "debug",
}


class Log(_LoggerFunction):
  """``Mage::log($message, $level, $file, $force)``; file and force are dropped."""

  kind = MageFunctionKind.LOG
  arity = (1, 4)

  def replacement(self) -> str:
    level = "debug"
    if len(self.call.args) > 1:
      raw = self.arg_text(1).strip().lstrip("\\")
      key = raw.rsplit("::", 1)[-1].lower() if raw.lower().startswith("zend_log::") else raw.lower()
      level = ZEND_LOG_LEVELS.get(key, "debug")
    return f"{self.service}->{level}({self.arg_text(0)})"


class _RegistryFunction(ServiceFunction):
  service_name = "registry"
  service_type = "\\Magento\\Framework\\Registry"

  def replacement(self) -> str:
    return self.forward(self.kind.value)


class Registry(_RegistryFunction):
  kind = MageFunctionKind.REGISTRY
  arity = (1, 1)


class Register(_RegistryFunction):
  kind = MageFunctionKind.REGISTER
  arity = (2, 3)


class Unregister(_RegistryFunction):
  kind = MageFunctionKind.UNREGISTER
  arity = (1, 1)


STORE_MANAGER_METHODS = frozenset(
  {
    "getstore",
    "getstores",
    "getwebsite",
    "getwebsites",
    "getgroup",
    "getgroups",
    "getdefaultstoreview",
    "issinglestoremode",
    "hassinglestore",
  }
)


class AppStoreManager(ServiceFunction):
  """
  ``Mage::app()->getStore`` and sibling store lookups.

  The span ends after the chained method name, so the chained call's own
  argument list is left as written.
  """

  kind = MageFunctionKind.APP_STORE_MANAGER
  service_name = "storeManager"
  service_type = "\\Magento\\Store\\Model\\StoreManagerInterface"

  @classmethod
  def _build(cls, stream, call, resolver):
    arrow = stream.next_significant(call.close_paren)
    if arrow is None or stream[arrow].kind != TokenKind.OBJECT_OPERATOR:
      return None
    name = stream.next_significant(arrow)
    if name is None or stream[name].kind != TokenKind.IDENTIFIER:
      return None
    if stream[name].text.lower() not in STORE_MANAGER_METHODS:
      return None
    variable = DiVariable(cls.service_name, cls.service_type)
    return cls(stream, call, end=name + 1, resolved_type=cls.service_type, di_variable=variable)

  def replacement(self) -> str:
    return f"{self.service}->{self.stream[self.end - 1].text}"


class GetBaseUrl(ServiceFunction):
  kind = MageFunctionKind.GET_BASE_URL
  service_name = "storeManager"
  service_type = "\\Magento\\Store\\Model\\StoreManagerInterface"
  arity = (0, 2)

  def replacement(self) -> str:
    return f"{self.service}->getStore()->getBaseUrl({self.args_text()})"


class GetUrl(ServiceFunction):
  kind = MageFunctionKind.GET_URL
  service_name = "urlBuilder"
  service_type = "\\Magento\\Framework\\UrlInterface"
  arity = (0, 2)

  def replacement(self) -> str:
    return self.forward("getUrl")


# M1 directory codes that were renamed in M2's DirectoryList.
BASE_DIR_CODES = {"skin": "static", "lib": "lib_internal"}


class GetBaseDir(ServiceFunction):
  kind = MageFunctionKind.GET_BASE_DIR
  service_name = "directoryList"
  service_type = "\\Magento\\Framework\\App\\Filesystem\\DirectoryList"
  arity = (0, 1)

  def replacement(self) -> str:
    if not self.call.args:
      return f"{self.service}->getRoot()"
    start, end = self.call.args[0]
    code = string_literal(self.stream.window(start, end))
    if code == "base":
      return f"{self.service}->getRoot()"
    if code in BASE_DIR_CODES:
      return f"{self.service}->getPath('{BASE_DIR_CODES[code]}')"
    return f"{self.service}->getPath({self.arg_text(0)})"


class GetVersion(ServiceFunction):
  kind = MageFunctionKind.GET_VERSION
  service_name = "productMetadata"
  service_type = "\\Magento\\Framework\\App\\ProductMetadataInterface"

  def replacement(self) -> str:
    return f"{self.service}->getVersion()"


class IsDeveloperMode(ServiceFunction):
  kind = MageFunctionKind.IS_DEVELOPER_MODE
  service_name = "appState"
  service_type = "\\Magento\\Framework\\App\\State"

  def replacement(self) -> str:
    return f"({self.service}->getMode() === \\Magento\\Framework\\App\\State::MODE_DEVELOPER)"


class ThrowException(MageFunction):
  """Needs no collaborator: becomes a plain ``throw`` expression."""

  kind = MageFunctionKind.THROW_EXCEPTION
  arity = (1, 2)

  def replacement(self) -> str:
    return f"throw new \\Magento\\Framework\\Exception\\LocalizedException(__({self.arg_text(0)}))"
