# menugraph/construct_stats.py
"""
Construct stats & filtering.

Read-only consumers of classify_all_products() output. They never look at
the menu graph itself (menu_overview aside, which only counts entity maps).
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from .construct_catalog import BEHAVIORAL_TAGS, PRIMARY_TYPES, STRUCTURAL_TAGS
from .menu_refs import as_mapping, display_name
from .menu_types import ClassifiedProduct, ConstructDef, Menu
from .visible_products import get_top_level_categories


def _stats_rows(defs: List[ConstructDef], counts: Counter, keep_zero: bool) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for c in defs:
        n = counts.get(c["id"], 0)
        if n == 0 and not keep_zero:
            continue
        rows.append({"id": c["id"], "code": c["code"], "name": c["name"], "count": n})
    return rows


def primary_type_stats(items: Iterable[ClassifiedProduct]) -> List[Dict[str, Any]]:
    """All five primary types in catalog order, zero counts included."""
    counts = Counter(it["primary_type"] for it in items)
    return _stats_rows(PRIMARY_TYPES, counts, keep_zero=True)


def behavioral_tag_stats(items: Iterable[ClassifiedProduct]) -> List[Dict[str, Any]]:
    """Behavioral tags that occur at least once, in catalog order."""
    counts = Counter(tag for it in items for tag in it["behavioral_tags"])
    return _stats_rows(BEHAVIORAL_TAGS, counts, keep_zero=False)


def structural_tag_stats(items: Iterable[ClassifiedProduct]) -> List[Dict[str, Any]]:
    counts = Counter(tag for it in items for tag in it["structural_tags"])
    return _stats_rows(STRUCTURAL_TAGS, counts, keep_zero=False)


def extra_flag_stats(items: Iterable[ClassifiedProduct]) -> Dict[str, int]:
    combos = modifiers = bundles = 0
    for it in items:
        flags = it["flags"]
        combos += int(flags["is_combo"])
        modifiers += int(flags["has_modifier_group_refs"])
        bundles += int(flags["has_bundle_link"])
    return {
        "combos": combos,
        "modifier_group_products": modifiers,
        "bundle_links": bundles,
    }


def category_stats(items: Iterable[ClassifiedProduct]) -> List[Dict[str, Any]]:
    """Product count per main category, in first-seen order."""
    rows: Dict[str, Dict[str, Any]] = {}
    for it in items:
        ref = it["main_category_ref"]
        row = rows.get(ref)
        if row is None:
            row = rows[ref] = {"ref": ref, "name": it["main_category_name"], "count": 0}
        row["count"] += 1
    return list(rows.values())


def filter_products(
    items: Iterable[ClassifiedProduct],
    primary_type: Optional[str] = None,
    behavioral_tag: Optional[str] = None,
    structural_tag: Optional[str] = None,
    category_ref: Optional[str] = None,
    search: Optional[str] = None,
) -> List[ClassifiedProduct]:
    """
    Narrow a classified list. Every filter given must match.

    category_ref matches either the owning category or the main category.
    search is a case-insensitive substring match on display name or ref.
    """
    q = (search or "").strip().lower()
    out: List[ClassifiedProduct] = []
    for it in items:
        if primary_type and it["primary_type"] != primary_type:
            continue
        if behavioral_tag and behavioral_tag not in it["behavioral_tags"]:
            continue
        if structural_tag and structural_tag not in it["structural_tags"]:
            continue
        if category_ref and category_ref not in (it["category_ref"], it["main_category_ref"]):
            continue
        if q:
            name = str(it["product"].get("displayName") or "").lower()
            if q not in name and q not in it["ref"].lower():
                continue
        out.append(it)
    return out


def menu_overview(menu: Optional[Menu]) -> Dict[str, Any]:
    """Entity counts and menu-level scalars."""
    menu = menu or {}
    top_level = len(get_top_level_categories(menu))
    return {
        "display_name": display_name(menu, ""),
        "is_available": menu.get("isAvailable"),
        "root_category_ref": menu.get("rootCategoryRef") or None,
        "total_products": len(as_mapping(menu.get("products"))),
        "total_categories": top_level,
        "total_product_groups": len(as_mapping(menu.get("productGroups"))),
        "total_modifier_groups": len(as_mapping(menu.get("modifierGroups"))),
        "total_modifiers": len(as_mapping(menu.get("modifiers"))),
    }


def build_stats(menu: Optional[Menu], items: List[ClassifiedProduct]) -> Dict[str, Any]:
    """Everything the stats endpoint / CLI summary shows, in one dict."""
    return {
        "overview": menu_overview(menu),
        "visible_products": len(items),
        "primary_types": primary_type_stats(items),
        "behavioral_tags": behavioral_tag_stats(items),
        "structural_tags": structural_tag_stats(items),
        "extra_flags": extra_flag_stats(items),
        "categories": category_stats(items),
    }
