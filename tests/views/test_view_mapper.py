"""
Tests for layout handle mapping.

Builds a miniature M1 design tree and M2 module tree on disk and checks
the candidate precedence, the area specific fallbacks and the JSON files.
"""

import json
import logging

import pytest

from mage_migrate.cli.commands import handle_view_mapping
from mage_migrate.views import OBSOLETE, M2HandleIndex, ViewMapper, candidates, layout_handles, map_handle


def write_layout(path, *handles):
  path.parent.mkdir(parents=True, exist_ok=True)
  body = "".join(f"<{h}><block type='core/template'/></{h}>" for h in handles)
  path.write_text(f"<?xml version='1.0'?>\n<layout version='0.1.0'>{body}</layout>\n", encoding="utf-8")


def touch_m2(root, module, area, *handles):
  layout = root / "app" / "code" / "Magento" / module / "view" / area / "layout"
  layout.mkdir(parents=True, exist_ok=True)
  for h in handles:
    (layout / f"{h}.xml").write_text("<page/>", encoding="utf-8")


@pytest.fixture
def checkouts(tmp_path):
  m1 = tmp_path / "m1"
  m2 = tmp_path / "m2"

  design = m1 / "app" / "design"
  write_layout(
    design / "frontend" / "base" / "default" / "layout" / "catalog.xml",
    "default",
    "catalog_product_view",
    "Cms_Index_Index",
    "review_product_list",
    "print",
    "poll_vote",
  )
  write_layout(
    design / "frontend" / "enterprise" / "default" / "layout" / "banner.xml",
    "enterprise_banner_index",
    "catalog_product_view",
  )
  write_layout(
    design / "adminhtml" / "default" / "default" / "layout" / "sales.xml",
    "adminhtml_sales_order_view",
    "adminhtml_customer_edit",
    "adminhtml_system_config",
    "adminhtml_dashboard",
  )
  bad = design / "adminhtml" / "default" / "default" / "layout" / "broken.xml"
  bad.write_text("<layout><unclosed></layout>", encoding="utf-8")

  touch_m2(m2, "Theme", "base", "default")
  touch_m2(m2, "Catalog", "frontend", "catalog_product_view")
  touch_m2(m2, "Cms", "frontend", "cms_index_index")
  touch_m2(m2, "Review", "frontend", "review_products_list")
  touch_m2(m2, "Theme", "frontend", "page_print")
  touch_m2(m2, "Banner", "frontend", "magento_banners_index")
  touch_m2(m2, "Sales", "adminhtml", "sales_order_view")
  touch_m2(m2, "Customer", "adminhtml", "customer_index_edit")
  touch_m2(m2, "Backend", "adminhtml", "backend_system_config", "adminhtml_main_dashboard")
  return m1, m2


def test_candidate_order_adminhtml():
  assert list(candidates("adminhtml_sales_order", "adminhtml")) == [
    "adminhtml_sales_order",
    r"adminhtml\S?_sales\S?_order",
    "sales_order",
    r"sales_([^_\s]+)_order",
    r"([^_\s]+)_sales_order",
    r"([^_\s]+)_([^_\s]+)_sales_order",
  ]


def test_candidate_order_frontend():
  assert list(candidates("enterprise_cms_page", "frontend")) == [
    "enterprise_cms_page",
    r"enterprise\S?_cms\S?_page",
    r"magento\S?_cms\S?_page",
    "page_enterprise_cms_page",
  ]
  assert list(candidates("checkout_cart", "frontend")) == [
    "checkout_cart",
    r"checkout\S?_cart",
    "page_checkout_cart",
  ]


def test_handles_are_escaped():
  index = M2HandleIndex(["catalogxproduct"])
  assert map_handle("catalog.product", "frontend", index) == OBSOLETE


def test_exact_match_wins_over_plural():
  index = M2HandleIndex(["catalogs_product", "catalog_product"])
  assert map_handle("catalog_product", "frontend", index) == "catalog_product"


def test_match_never_spans_two_handles():
  index = M2HandleIndex(["a", "b_dashboard"])
  assert map_handle("adminhtml_dashboard", "adminhtml", index) == "b_dashboard"


def test_index_from_directory_includes_base(checkouts):
  _, m2 = checkouts
  index = M2HandleIndex.from_directory(m2, "adminhtml")
  assert "default" in index.handles
  assert "sales_order_view" in index.handles
  assert "catalog_product_view" not in index.handles


def test_frontend_mapping(checkouts):
  m1, m2 = checkouts

  mapping = ViewMapper(m1, m2).map_area("frontend")

  assert mapping == {
    "default": "default",
    "catalog_product_view": "catalog_product_view",
    "Cms_Index_Index": "cms_index_index",
    "review_product_list": "review_products_list",
    "print": "page_print",
    "poll_vote": OBSOLETE,
    "enterprise_banner_index": "magento_banners_index",
  }


def test_adminhtml_mapping_skips_malformed_files(checkouts, caplog):
  m1, m2 = checkouts

  with caplog.at_level(logging.WARNING):
    mapping = ViewMapper(m1, m2).map_area("adminhtml")

  assert mapping == {
    "adminhtml_sales_order_view": "sales_order_view",
    "adminhtml_customer_edit": "customer_index_edit",
    "adminhtml_system_config": "backend_system_config",
    "adminhtml_dashboard": "adminhtml_main_dashboard",
  }
  assert "broken.xml" in caplog.text


def test_write_lowercases_output(checkouts, tmp_path):
  m1, m2 = checkouts
  out = tmp_path / "mapping"

  written = ViewMapper(m1, m2).write(out)

  assert [p.name for p in written] == ["view_mapping_adminhtml.json", "view_mapping_frontend.json"]
  text = (out / "view_mapping_frontend.json").read_text(encoding="utf-8")
  assert text == text.lower()
  assert json.loads(text)["cms_index_index"] == "cms_index_index"


def test_layout_handles_in_file_order():
  source = (
    "<layout version='0.1.0'><!-- header --><default/>"
    "<catalog_product_view><reference name='x'/></catalog_product_view><default/></layout>"
  )
  assert layout_handles(source) == ["default", "catalog_product_view"]


def test_view_mapping_command(checkouts, tmp_path):
  m1, m2 = checkouts
  out = tmp_path / "maps"

  assert handle_view_mapping(m1, m2, out) == 0
  assert (out / "view_mapping_adminhtml.json").exists()

  assert handle_view_mapping(tmp_path / "missing", m2, out) == 1
  assert handle_view_mapping(m1, tmp_path / "missing", out) == 1
