"""
Day 94 -- Bundle Links (standalone product -> combo/meal counterpart).

Covers:
  Forward link (pass 1):
  - string "products.*" pointer resolves to {ref, product, name}
  - bundle_target_ref / bundle_target_name written on the source record
  - object / productGroups / dangling / self pointers are not recorded
  - has-bundle structural tag follows the raw flag, not the resolution

  Reverse index (pass 2):
  - two sources bundling to one meal -> bundle_sources of length 2
  - sources listed in classification order
  - bundle_sources key absent when nothing points at a product
  - attach_bundle_sources returns new records, input untouched

  Menu-wide lookup:
  - get_bundle_sources finds non-visible sources too
"""

from __future__ import annotations

import copy

from menugraph.bundle_links import (
    attach_bundle_sources,
    build_bundle_index,
    bundle_pointer,
    get_bundle_sources,
    get_bundle_target,
)
from menugraph.construct_classifier import classify_all_products


def _gyro_menu():
    return {
        "displayName": "Gyro House",
        "rootCategoryRef": "categories.root",
        "categories": {
            "root": {"childRefs": {"categories.gyros": {}, "categories.meals": {}}},
            "gyros": {"displayName": "Gyros",
                      "childRefs": {"products.gyro": {}, "products.gyro-spicy": {}, "products.falafel": {}}},
            "meals": {"displayName": "Meals", "childRefs": {"products.gyro-meal": {}}},
        },
        "products": {
            "gyro": {"displayName": "Gyro", "relatedProducts": {"bundle": "products.gyro-meal"}},
            "gyro-spicy": {"displayName": "Spicy Gyro", "relatedProducts": {"bundle": "products.gyro-meal"}},
            "falafel": {"displayName": "Falafel"},
            "gyro-meal": {"displayName": "Gyro Meal", "isCombo": True},
            "hidden-gyro": {"displayName": "Hidden", "relatedProducts": {"bundle": "products.gyro-meal"}},
        },
    }


def _by_ref(items):
    return {it["ref"]: it for it in items}


# ===========================================================================
# SECTION 1: Forward link
# ===========================================================================

class TestBundleTarget:

    def test_pointer(self):
        assert bundle_pointer({"relatedProducts": {"bundle": "products.x"}}) == "products.x"
        assert bundle_pointer({"relatedProducts": {"bundle": {"ref": "products.x"}}}) is None
        assert bundle_pointer({"relatedProducts": {"bundle": "productGroups.x"}}) is None
        assert bundle_pointer({}) is None

    def test_target_resolves(self):
        menu = _gyro_menu()
        target = get_bundle_target(menu, menu["products"]["gyro"], own_ref="products.gyro")
        assert target["ref"] == "products.gyro-meal"
        assert target["name"] == "Gyro Meal"
        assert target["product"]["isCombo"] is True

    def test_dangling_target(self):
        menu = _gyro_menu()
        assert get_bundle_target(menu, {"relatedProducts": {"bundle": "products.nope"}}) is None

    def test_self_link_ignored(self):
        menu = _gyro_menu()
        product = {"relatedProducts": {"bundle": "products.gyro"}}
        assert get_bundle_target(menu, product, own_ref="products.gyro") is None

    def test_record_fields(self):
        items = _by_ref(classify_all_products(_gyro_menu()))
        gyro = items["products.gyro"]
        assert gyro["bundle_target_ref"] == "products.gyro-meal"
        assert gyro["bundle_target_name"] == "Gyro Meal"
        assert "has-bundle" in gyro["structural_tags"]
        assert "bundle_target_ref" not in items["products.falafel"]

    def test_object_bundle_flag_without_target(self):
        menu = _gyro_menu()
        menu["products"]["falafel"]["relatedProducts"] = {"bundle": {"ref": "products.gyro-meal"}}
        falafel = _by_ref(classify_all_products(menu))["products.falafel"]
        assert falafel["flags"]["has_bundle_link"] is True
        assert "has-bundle" in falafel["structural_tags"]
        assert "bundle_target_ref" not in falafel


# ===========================================================================
# SECTION 2: Reverse index
# ===========================================================================

class TestBundleSources:

    def test_two_sources(self):
        meal = _by_ref(classify_all_products(_gyro_menu()))["products.gyro-meal"]
        assert len(meal["bundle_sources"]) == 2
        assert meal["bundle_sources"] == [
            {"ref": "products.gyro", "name": "Gyro"},
            {"ref": "products.gyro-spicy", "name": "Spicy Gyro"},
        ]

    def test_non_visible_source_not_counted(self):
        meal = _by_ref(classify_all_products(_gyro_menu()))["products.gyro-meal"]
        assert "products.hidden-gyro" not in [s["ref"] for s in meal["bundle_sources"]]

    def test_key_absent_without_sources(self):
        items = _by_ref(classify_all_products(_gyro_menu()))
        assert "bundle_sources" not in items["products.gyro"]
        assert "bundle_sources" not in items["products.falafel"]

    def test_target_earlier_than_sources(self):
        menu = _gyro_menu()
        menu["categories"]["root"]["childRefs"] = {"categories.meals": {}, "categories.gyros": {}}
        meal = _by_ref(classify_all_products(menu))["products.gyro-meal"]
        assert len(meal["bundle_sources"]) == 2

    def test_index(self):
        items = [
            {"ref": "products.a", "product": {"displayName": "A"}, "bundle_target_ref": "products.m"},
            {"ref": "products.b", "product": {}, "bundle_target_ref": "products.m"},
            {"ref": "products.m", "product": {}},
        ]
        assert build_bundle_index(items) == {
            "products.m": [{"ref": "products.a", "name": "A"}, {"ref": "products.b", "name": "products.b"}],
        }

    def test_attach_returns_new_records(self):
        items = [
            {"ref": "products.a", "product": {}, "bundle_target_ref": "products.m"},
            {"ref": "products.m", "product": {}},
        ]
        before = copy.deepcopy(items)
        out = attach_bundle_sources(items)
        assert items == before
        assert out[1]["bundle_sources"] == [{"ref": "products.a", "name": "products.a"}]
        assert out[0] is items[0]


# ===========================================================================
# SECTION 3: Menu-wide lookup
# ===========================================================================

class TestMenuWideSources:

    def test_includes_hidden_products(self):
        refs = [s["ref"] for s in get_bundle_sources(_gyro_menu(), "products.gyro-meal")]
        assert refs == ["products.gyro", "products.gyro-spicy", "products.hidden-gyro"]

    def test_no_sources(self):
        assert get_bundle_sources(_gyro_menu(), "products.falafel") == []
