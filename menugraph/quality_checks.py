# menugraph/quality_checks.py
"""
Menu Data-Quality Checks

PURPOSE:
Read-only audits of a menu document that flag constructs which are almost
always data-entry mistakes. Like the classifier, these checks never modify
the menu and never try to repair it; they measure and report.

CHECKS:
  1. virtual_products_with_ingredient_refs
       Virtual products should front sized variants, not carry a recipe.
  2. orphaned_virtual_products
       Virtual products with neither alternatives nor modifier groups have
       nothing for the guest to pick; they lead nowhere.
  3. groups_missing_default
       Selection groups reachable from a virtual product (productGroups via
       relatedProducts, modifierGroups via modifierGroupRefs) where no child
       is marked isDefault. The ordering UI has nothing to pre-select.

These run over *all* products in the menu, not only the visible ones, so
unreachable leftovers are audited too.

Entry function: build_quality_report(menu)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .menu_overrides import merge_with_overrides
from .menu_refs import (
    PRODUCT_PREFIX,
    as_mapping,
    display_name,
    has_keys,
    is_modifier_group_ref,
    is_recipe_group,
    resolve_ref,
)
from .menu_types import Menu, Ref
from .visible_products import related_group_refs

log = logging.getLogger(__name__)


def _iter_products(menu: Optional[Menu]) -> Iterator[Tuple[Ref, Dict[str, Any]]]:
    """
    (products.<id>, product) for every product in the map.

    Some exporters already key the map by full ref; those keys are kept
    as-is instead of being double-prefixed.
    """
    for key, product in as_mapping((menu or {}).get("products")).items():
        if not isinstance(product, dict):
            continue
        ref = key if key.startswith(PRODUCT_PREFIX) else f"{PRODUCT_PREFIX}{key}"
        yield ref, product


def _is_virtual(product: Dict[str, Any]) -> bool:
    return product.get("isVirtual") is True


# ---------------------------------------------------------------------------
# 1. Virtual products carrying ingredientRefs
# ---------------------------------------------------------------------------

def virtual_products_with_ingredient_refs(menu: Optional[Menu]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for ref, product in _iter_products(menu):
        if not _is_virtual(product):
            continue
        ingredient_refs = as_mapping(product.get("ingredientRefs"))
        if not ingredient_refs:
            continue
        keys = list(ingredient_refs)
        related = as_mapping(product.get("relatedProducts"))
        out.append({
            "product_ref": ref,
            "product_name": display_name(product, ref),
            "ingredient_ref_keys": keys,
            "ingredient_groups": [
                {"ref": k, "name": display_name(resolve_ref(menu, k), k)} for k in keys
            ],
            "has_alternatives": has_keys(related.get("alternatives")),
            "has_modifier_group_refs": has_keys(product.get("modifierGroupRefs")),
        })
    return out


# ---------------------------------------------------------------------------
# 2. Orphaned virtual products
# ---------------------------------------------------------------------------

def orphaned_virtual_products(menu: Optional[Menu]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for ref, product in _iter_products(menu):
        if not _is_virtual(product):
            continue
        related = as_mapping(product.get("relatedProducts"))
        if has_keys(related.get("alternatives")) or has_keys(product.get("modifierGroupRefs")):
            continue
        ingredient_refs = as_mapping(product.get("ingredientRefs"))
        out.append({
            "product_ref": ref,
            "product_name": display_name(product, ref),
            "has_ingredient_refs": len(ingredient_refs) > 0,
            "ingredient_ref_count": len(ingredient_refs),
        })
    return out


# ---------------------------------------------------------------------------
# 3. Selection groups with no default
# ---------------------------------------------------------------------------

def _group_children(menu: Optional[Menu], group: Dict[str, Any]) -> List[Dict[str, Any]]:
    children: List[Dict[str, Any]] = []
    for child_ref, override in as_mapping(group.get("childRefs")).items():
        merged = merge_with_overrides(resolve_ref(menu, child_ref), override)
        children.append({
            "ref": child_ref,
            "name": display_name(merged, child_ref),
            "is_default": merged.get("isDefault") is True,
        })
    return children


def _missing_default_entry(
    menu: Optional[Menu],
    group_ref: Ref,
    source_type: str,
) -> Optional[Dict[str, Any]]:
    group = resolve_ref(menu, group_ref)
    if group is None:
        return None
    children = _group_children(menu, group)
    if not children or any(c["is_default"] for c in children):
        return None
    return {
        "group_ref": group_ref,
        "group_name": display_name(group, group_ref),
        "source_type": source_type,
        "is_recipe": is_recipe_group(group),
        "child_count": len(children),
        "children": children,
    }


def groups_missing_default(menu: Optional[Menu]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for ref, product in _iter_products(menu):
        if not _is_virtual(product):
            continue

        groups: List[Dict[str, Any]] = []
        for group_ref in related_group_refs(product):
            entry = _missing_default_entry(menu, group_ref, "productGroup")
            if entry:
                groups.append(entry)
        for group_ref in as_mapping(product.get("modifierGroupRefs")):
            if not is_modifier_group_ref(group_ref):
                continue
            entry = _missing_default_entry(menu, group_ref, "modifierGroup")
            if entry:
                groups.append(entry)

        if groups:
            out.append({
                "product_ref": ref,
                "product_name": display_name(product, ref),
                "groups": groups,
            })
    return out


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

def build_quality_report(menu: Optional[Menu]) -> Dict[str, Any]:
    virtual_ingredients = virtual_products_with_ingredient_refs(menu)
    orphaned = orphaned_virtual_products(menu)
    missing_default = groups_missing_default(menu)

    counts = {
        "virtual_with_ingredient_refs": len(virtual_ingredients),
        "orphaned_virtual_products": len(orphaned),
        "virtual_groups_missing_default": len(missing_default),
    }
    report = {
        "virtual_with_ingredient_refs": virtual_ingredients,
        "orphaned_virtual_products": orphaned,
        "virtual_groups_missing_default": missing_default,
        "counts": counts,
        "issue_total": sum(counts.values()),
    }
    log.info("Quality report: %s", counts)
    return report
