"""
Tests for legacy call recognition and rewriting.

Each catalog entry is matched on a minimal fragment and converted; the
rewritten fragment and the collaborator it requires are checked.
"""

import pytest

from mage_migrate.core.errors import StaleSpanError
from mage_migrate.core.mage import CATALOG, MageFunctionKind, MageFunctionMatcher, UnresolvedFunction
from mage_migrate.core.mage.functions import GetModel, Helper, MageFunction
from mage_migrate.core.token_stream import TokenStream

SCOPE = "\\Magento\\Store\\Model\\ScopeInterface::SCOPE_STORE"


@pytest.fixture
def matcher(resolver):
  return MageFunctionMatcher(resolver)


def match_first(matcher, code):
  stream = TokenStream.from_source(f"<?php {code}")
  index = next(t.index for t in stream if t.text.lstrip("\\").lower() == "mage")
  return stream, matcher.match(stream, index)


def rewrite(matcher, code):
  stream, found = match_first(matcher, code)
  assert found is not None and not isinstance(found, UnresolvedFunction), found
  end = found.convert()
  return stream.render(found.start, end), found


@pytest.mark.parametrize(
  "code, expected, kind, variable, di_type",
  [
    (
      "Mage::getModel('catalog/product')",
      "$this->catalogProductFactory->create()",
      MageFunctionKind.GET_MODEL,
      "catalogProductFactory",
      "\\Magento\\Catalog\\Model\\ProductFactory",
    ),
    (
      "Mage::getModel('catalog/product', $data)",
      "$this->catalogProductFactory->create(['data' => $data])",
      MageFunctionKind.GET_MODEL,
      "catalogProductFactory",
      "\\Magento\\Catalog\\Model\\ProductFactory",
    ),
    (
      "Mage::getSingleton('catalog/session')",
      "$this->catalogSession",
      MageFunctionKind.GET_SINGLETON,
      "catalogSession",
      "\\Magento\\Catalog\\Model\\Session",
    ),
    (
      "Mage::getResourceModel(\"catalog/product_collection\")",
      "$this->catalogResourceModelProductCollectionFactory->create()",
      MageFunctionKind.GET_RESOURCE_MODEL,
      "catalogResourceModelProductCollectionFactory",
      "\\Magento\\Catalog\\Model\\ResourceModel\\Product\\CollectionFactory",
    ),
    (
      "Mage::getResourceSingleton('catalog/product')",
      "$this->catalogResourceModelProduct",
      MageFunctionKind.GET_RESOURCE_SINGLETON,
      "catalogResourceModelProduct",
      "\\Magento\\Catalog\\Model\\ResourceModel\\Product",
    ),
    (
      "Mage::helper('catalog')",
      "$this->catalogHelper",
      MageFunctionKind.HELPER,
      "catalogHelper",
      "\\Magento\\Catalog\\Helper\\Data",
    ),
    (
      "Mage::getSingleton('core/config')",
      "$this->frameworkAppConfigScopeConfigInterface",
      MageFunctionKind.GET_SINGLETON,
      "frameworkAppConfigScopeConfigInterface",
      "\\Magento\\Framework\\App\\Config\\ScopeConfigInterface",
    ),
    (
      "Mage::getStoreConfigFlag('web/secure/use')",
      f"$this->scopeConfig->isSetFlag('web/secure/use', {SCOPE})",
      MageFunctionKind.GET_STORE_CONFIG_FLAG,
      "scopeConfig",
      "\\Magento\\Framework\\App\\Config\\ScopeConfigInterface",
    ),
    (
      "Mage::getStoreConfig($path, $storeId)",
      f"$this->scopeConfig->getValue($path, {SCOPE}, $storeId)",
      MageFunctionKind.GET_STORE_CONFIG,
      "scopeConfig",
      "\\Magento\\Framework\\App\\Config\\ScopeConfigInterface",
    ),
    (
      "Mage::dispatchEvent('order_saved', array('order' => $o))",
      "$this->eventManager->dispatch('order_saved', array('order' => $o))",
      MageFunctionKind.DISPATCH_EVENT,
      "eventManager",
      "\\Magento\\Framework\\Event\\ManagerInterface",
    ),
    (
      "Mage::logException($e)",
      "$this->logger->critical($e)",
      MageFunctionKind.LOG_EXCEPTION,
      "logger",
      "\\Psr\\Log\\LoggerInterface",
    ),
    (
      "Mage::log($msg, Zend_Log::ERR, 'acme.log', true)",
      "$this->logger->error($msg)",
      MageFunctionKind.LOG,
      "logger",
      "\\Psr\\Log\\LoggerInterface",
    ),
    (
      "Mage::log($m, \\Zend_Log::WARN)",
      "$this->logger->warning($m)",
      MageFunctionKind.LOG,
      "logger",
      "\\Psr\\Log\\LoggerInterface",
    ),
    ("Mage::log('hi')", "$this->logger->debug('hi')", MageFunctionKind.LOG, "logger", "\\Psr\\Log\\LoggerInterface"),
    (
      "Mage::registry('current_product')",
      "$this->registry->registry('current_product')",
      MageFunctionKind.REGISTRY,
      "registry",
      "\\Magento\\Framework\\Registry",
    ),
    (
      "Mage::register('key', $value, true)",
      "$this->registry->register('key', $value, true)",
      MageFunctionKind.REGISTER,
      "registry",
      "\\Magento\\Framework\\Registry",
    ),
    (
      "Mage::unregister('key')",
      "$this->registry->unregister('key')",
      MageFunctionKind.UNREGISTER,
      "registry",
      "\\Magento\\Framework\\Registry",
    ),
    (
      "Mage::app()->getStore($id)",
      "$this->storeManager->getStore",
      MageFunctionKind.APP_STORE_MANAGER,
      "storeManager",
      "\\Magento\\Store\\Model\\StoreManagerInterface",
    ),
    (
      "Mage::getBaseUrl('media')",
      "$this->storeManager->getStore()->getBaseUrl('media')",
      MageFunctionKind.GET_BASE_URL,
      "storeManager",
      "\\Magento\\Store\\Model\\StoreManagerInterface",
    ),
    (
      "Mage::getUrl('checkout/cart', array('_secure' => true))",
      "$this->urlBuilder->getUrl('checkout/cart', array('_secure' => true))",
      MageFunctionKind.GET_URL,
      "urlBuilder",
      "\\Magento\\Framework\\UrlInterface",
    ),
    (
      "Mage::getBaseDir('var')",
      "$this->directoryList->getPath('var')",
      MageFunctionKind.GET_BASE_DIR,
      "directoryList",
      "\\Magento\\Framework\\App\\Filesystem\\DirectoryList",
    ),
    (
      "Mage::getBaseDir('skin')",
      "$this->directoryList->getPath('static')",
      MageFunctionKind.GET_BASE_DIR,
      "directoryList",
      "\\Magento\\Framework\\App\\Filesystem\\DirectoryList",
    ),
    (
      "Mage::getBaseDir()",
      "$this->directoryList->getRoot()",
      MageFunctionKind.GET_BASE_DIR,
      "directoryList",
      "\\Magento\\Framework\\App\\Filesystem\\DirectoryList",
    ),
    (
      "Mage::getVersion()",
      "$this->productMetadata->getVersion()",
      MageFunctionKind.GET_VERSION,
      "productMetadata",
      "\\Magento\\Framework\\App\\ProductMetadataInterface",
    ),
    (
      "Mage::getIsDeveloperMode()",
      "($this->appState->getMode() === \\Magento\\Framework\\App\\State::MODE_DEVELOPER)",
      MageFunctionKind.IS_DEVELOPER_MODE,
      "appState",
      "\\Magento\\Framework\\App\\State",
    ),
  ],
)
def test_catalog_rewrites(matcher, code, expected, kind, variable, di_type):
  text, found = rewrite(matcher, code + ";")
  assert text == expected
  assert found.kind == kind
  assert found.di_variable_name == variable
  assert found.di_variable.type == di_type


def test_throw_exception_needs_no_collaborator(matcher):
  text, found = rewrite(matcher, "Mage::throwException($this->__('Bad input'));")
  assert text == "throw new \\Magento\\Framework\\Exception\\LocalizedException(__($this->__('Bad input')))"
  assert found.di_variable is None


def test_app_store_manager_keeps_chained_arguments(matcher):
  stream, found = match_first(matcher, "$id = Mage::app()->getWebsite($code)->getId();")
  found.convert()
  assert stream.render() == "<?php $id = $this->storeManager->getWebsite($code)->getId();"


def test_trivia_between_call_tokens(matcher):
  text, _ = rewrite(matcher, "\\Mage :: /* x */ helper ( 'catalog' );")
  assert text == "$this->catalogHelper"


def test_method_names_are_case_insensitive(matcher):
  _, found = match_first(matcher, "Mage::GETMODEL('catalog/product');")
  assert found.kind == MageFunctionKind.GET_MODEL


@pytest.mark.parametrize(
  "code, reason",
  [
    ("Mage::getModel($alias);", "not a string literal"),
    ("Mage::getModel(\"catalog/{$type}\");", "not a string literal"),
    ("Mage::getModel('nosuchgroup/thing');", "no Magento 2 class"),
    ("Mage::getModel('log/visitor');", "no Magento 2 class"),
    ("Mage::getModel();", "unsupported argument count 0"),
    ("Mage::getRequestPath();", "unsupported method"),
    ("Mage::app()->getRequest();", "unsupported method"),
  ],
)
def test_unresolved_calls(matcher, code, reason):
  stream, found = match_first(matcher, code)
  before = stream.render()

  assert isinstance(found, UnresolvedFunction)
  assert reason in found.reason
  assert found.di_variable is None
  assert found.convert() == found.end
  assert stream.render() == before


@pytest.mark.parametrize(
  "code",
  [
    "$this->Mage::getModel('catalog/product');",
    "Mage_Core::getModel('catalog/product');",
    "Mage::$config;",
    "$this->catalogProductFactory->create();",
    "Mage::getModel('catalog/product'",
  ],
)
def test_non_calls_do_not_match(matcher, code):
  stream = TokenStream.from_source(f"<?php {code}")
  assert all(matcher.match(stream, i) is None for i in range(len(stream)))


def test_match_is_pure(matcher):
  stream, found = match_first(matcher, "Mage::helper('catalog');")
  before = stream.tokens
  revision = stream.revision
  matcher.match(stream, found.start)
  assert stream.revision == revision
  assert [(t.kind, t.text) for t in stream] == [(t.kind, t.text) for t in before]


def test_stale_match_refuses_to_convert(matcher):
  stream, found = match_first(matcher, "Mage::helper('catalog'); $x = 1;")
  stream.insert(0, "")
  with pytest.raises(StaleSpanError):
    found.convert()


def test_catalog_order_decides_overlap(resolver):
  class GreedyHelper(MageFunction):
    kind = MageFunctionKind.HELPER
    arity = (1, 1)

    def replacement(self):
      return "greedy()"

  stream = TokenStream.from_source("<?php Mage::helper('catalog');")
  index = next(t.index for t in stream if t.text == "Mage")

  first = MageFunctionMatcher(resolver, catalog=(GreedyHelper, Helper)).match(stream, index)
  second = MageFunctionMatcher(resolver, catalog=(Helper, GreedyHelper)).match(stream, index)

  assert isinstance(first, GreedyHelper)
  assert isinstance(second, Helper)


def test_catalog_kinds_are_unique():
  kinds = [variant.kind for variant in CATALOG]
  assert len(kinds) == len(set(kinds)) == len(MageFunctionKind) - 1
  assert CATALOG[0] is GetModel
