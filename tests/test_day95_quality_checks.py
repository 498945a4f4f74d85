"""
Day 95 -- Menu Data-Quality Checks.

Covers:
  Virtual products with ingredientRefs:
  - flagged with resolved group names (ref fallback when dangling)
  - alternatives / modifier-group context carried on the entry
  - non-virtual products with ingredients never flagged

  Orphaned virtual products:
  - no alternatives and no modifier groups -> flagged
  - alternatives or modifier groups -> not flagged
  - ingredient count reported

  Groups missing a default:
  - alternatives productGroup with no default child
  - modifierGroup with no default child
  - default set on the edge or on the child entity satisfies the check
  - empty / dangling groups not flagged
  - isRecipe string form read

  Report:
  - counts + issue_total
  - all products audited, visible or not
  - keys already prefixed with "products." kept as-is
  - clean menu -> zero issues
"""

from __future__ import annotations

from menugraph.quality_checks import (
    build_quality_report,
    groups_missing_default,
    orphaned_virtual_products,
    virtual_products_with_ingredient_refs,
)


def _menu(products, product_groups=None, modifier_groups=None, modifiers=None):
    return {
        "rootCategoryRef": "categories.root",
        "categories": {"root": {"childRefs": {}}},
        "products": products,
        "productGroups": product_groups or {},
        "modifierGroups": modifier_groups or {},
        "modifiers": modifiers or {},
    }


# ===========================================================================
# SECTION 1: Virtual products with ingredientRefs
# ===========================================================================

class TestVirtualWithIngredients:

    def test_flagged(self):
        menu = _menu(
            {"wrap": {"displayName": "Wrap", "isVirtual": True,
                      "ingredientRefs": {"productGroups.wrap-recipe": {}, "productGroups.gone": {}}}},
            {"wrap-recipe": {"displayName": "Wrap Recipe", "childRefs": {}}},
        )
        found = virtual_products_with_ingredient_refs(menu)
        assert len(found) == 1
        entry = found[0]
        assert entry["product_ref"] == "products.wrap"
        assert entry["product_name"] == "Wrap"
        assert entry["ingredient_ref_keys"] == ["productGroups.wrap-recipe", "productGroups.gone"]
        assert entry["ingredient_groups"] == [
            {"ref": "productGroups.wrap-recipe", "name": "Wrap Recipe"},
            {"ref": "productGroups.gone", "name": "productGroups.gone"},
        ]
        assert entry["has_alternatives"] is False
        assert entry["has_modifier_group_refs"] is False

    def test_context_flags(self):
        menu = _menu({"wrap": {
            "isVirtual": True,
            "ingredientRefs": {"productGroups.r": {}},
            "modifierGroupRefs": {"modifierGroups.m": {}},
            "relatedProducts": {"alternatives": {"productGroups.s": {}}},
        }})
        entry = virtual_products_with_ingredient_refs(menu)[0]
        assert entry["has_alternatives"] is True
        assert entry["has_modifier_group_refs"] is True

    def test_non_virtual_ignored(self):
        menu = _menu({"burger": {"ingredientRefs": {"productGroups.r": {}}}})
        assert virtual_products_with_ingredient_refs(menu) == []

    def test_empty_ingredients_ignored(self):
        menu = _menu({"wrap": {"isVirtual": True, "ingredientRefs": {}}})
        assert virtual_products_with_ingredient_refs(menu) == []


# ===========================================================================
# SECTION 2: Orphaned virtual products
# ===========================================================================

class TestOrphanedVirtual:

    def test_flagged(self):
        menu = _menu({"ghost": {"displayName": "Ghost", "isVirtual": True}})
        assert orphaned_virtual_products(menu) == [{
            "product_ref": "products.ghost",
            "product_name": "Ghost",
            "has_ingredient_refs": False,
            "ingredient_ref_count": 0,
        }]

    def test_ingredient_count(self):
        menu = _menu({"ghost": {"isVirtual": True,
                                "ingredientRefs": {"productGroups.a": {}, "productGroups.b": {}}}})
        entry = orphaned_virtual_products(menu)[0]
        assert entry["has_ingredient_refs"] is True
        assert entry["ingredient_ref_count"] == 2

    def test_alternatives_not_orphaned(self):
        menu = _menu({"cola": {"isVirtual": True,
                               "relatedProducts": {"alternatives": {"productGroups.size": {}}}}})
        assert orphaned_virtual_products(menu) == []

    def test_modifier_groups_not_orphaned(self):
        menu = _menu({"pick": {"isVirtual": True, "modifierGroupRefs": {"modifierGroups.m": {}}}})
        assert orphaned_virtual_products(menu) == []

    def test_non_virtual_ignored(self):
        assert orphaned_virtual_products(_menu({"water": {}})) == []


# ===========================================================================
# SECTION 3: Groups missing a default
# ===========================================================================

class TestGroupsMissingDefault:

    def test_product_group_without_default(self):
        menu = _menu(
            {"cola": {"displayName": "Cola", "isVirtual": True,
                      "relatedProducts": {"alternatives": {"productGroups.size": {}}}},
             "sm": {"displayName": "Small"}, "lg": {"displayName": "Large"}},
            {"size": {"displayName": "Size", "childRefs": {"products.sm": {}, "products.lg": {}}}},
        )
        found = groups_missing_default(menu)
        assert len(found) == 1
        assert found[0]["product_ref"] == "products.cola"
        group = found[0]["groups"][0]
        assert group["group_ref"] == "productGroups.size"
        assert group["group_name"] == "Size"
        assert group["source_type"] == "productGroup"
        assert group["is_recipe"] is False
        assert group["child_count"] == 2
        assert [c["name"] for c in group["children"]] == ["Small", "Large"]

    def test_modifier_group_without_default(self):
        menu = _menu(
            {"pick": {"isVirtual": True, "modifierGroupRefs": {"modifierGroups.sauce": {}}}},
            modifier_groups={"sauce": {"isRecipe": "True",
                                       "childRefs": {"modifiers.ranch": {}, "modifiers.bbq": {}}}},
            modifiers={"ranch": {}, "bbq": {}},
        )
        group = groups_missing_default(menu)[0]["groups"][0]
        assert group["source_type"] == "modifierGroup"
        assert group["is_recipe"] is True

    def test_edge_default_satisfies(self):
        menu = _menu(
            {"cola": {"isVirtual": True, "relatedProducts": {"alternatives": {"productGroups.size": {}}}},
             "sm": {}},
            {"size": {"childRefs": {"products.sm": {"isDefault": True}}}},
        )
        assert groups_missing_default(menu) == []

    def test_entity_default_satisfies(self):
        menu = _menu(
            {"cola": {"isVirtual": True, "relatedProducts": {"alternatives": {"productGroups.size": {}}}},
             "sm": {"isDefault": True}},
            {"size": {"childRefs": {"products.sm": {}}}},
        )
        assert groups_missing_default(menu) == []

    def test_empty_and_dangling_groups(self):
        menu = _menu(
            {"cola": {"isVirtual": True,
                      "relatedProducts": {"alternatives": {"productGroups.empty": {},
                                                           "productGroups.gone": {}}}}},
            {"empty": {"childRefs": {}}},
        )
        assert groups_missing_default(menu) == []

    def test_direct_related_group_key(self):
        menu = _menu(
            {"combo": {"isVirtual": True, "relatedProducts": {"productGroups.sides": {}}}, "fries": {}},
            {"sides": {"childRefs": {"products.fries": {}}}},
        )
        assert groups_missing_default(menu)[0]["groups"][0]["group_ref"] == "productGroups.sides"

    def test_non_virtual_ignored(self):
        menu = _menu(
            {"cola": {"relatedProducts": {"alternatives": {"productGroups.size": {}}}}, "sm": {}},
            {"size": {"childRefs": {"products.sm": {}}}},
        )
        assert groups_missing_default(menu) == []


# ===========================================================================
# SECTION 4: Report
# ===========================================================================

class TestQualityReport:

    def test_counts(self):
        menu = _menu({
            "ghost": {"isVirtual": True},
            "wrap": {"isVirtual": True, "ingredientRefs": {"productGroups.r": {}}},
        })
        report = build_quality_report(menu)
        assert report["counts"] == {
            "virtual_with_ingredient_refs": 1,
            "orphaned_virtual_products": 2,
            "virtual_groups_missing_default": 0,
        }
        assert report["issue_total"] == 3

    def test_prefixed_keys_kept(self):
        menu = _menu({"products.ghost": {"isVirtual": True}})
        assert orphaned_virtual_products(menu)[0]["product_ref"] == "products.ghost"

    def test_clean_menu(self):
        menu = _menu({"water": {}, "burger": {"ingredientRefs": {"productGroups.r": {}}}})
        report = build_quality_report(menu)
        assert report["issue_total"] == 0
        assert report["orphaned_virtual_products"] == []

    def test_empty_menu(self):
        assert build_quality_report(None)["issue_total"] == 0
        assert build_quality_report({})["issue_total"] == 0
