# menugraph/construct_classifier.py
"""
Construct Classifier

Derives, for every visible product of a menu, a structural classification
used by the menu-quality audit tooling.

Pipeline (classify_all_products):

    collect_visible_products      visible_products.py
      → compute_flags             six raw booleans
      → classify_primary_type     one of five labels (decision table)
      → detect_structural_tags    flag-only tags
      → detect_behavioral_tags    one level into ingredient groups
      → get_bundle_target         forward bundle link (pass 1)
    attach_bundle_sources         reverse bundle index (pass 2)

Primary type decision table (first matching row wins):

    is_virtual  has_ingredients  has_alternatives  →  primary
    ----------  ---------------  ----------------     ------------------
    yes         no               no                   Virtual
    -           yes              yes                  Sized+Customizable
    -           no               yes                  Sized
    -           yes              no                   Customizable
    -           no               no                   Leaf

A virtual product that carries ingredients or alternatives falls through
the first row and is classified like any other product. Modifier groups
never change the primary type; they only show up as a structural tag.

Everything here is a pure function of the menu snapshot: no module state,
no caching, no mutation of the input.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .bundle_links import attach_bundle_sources, get_bundle_target
from .construct_catalog import (
    PRIMARY_CUSTOMIZABLE,
    PRIMARY_LEAF,
    PRIMARY_SIZED,
    PRIMARY_SIZED_CUSTOMIZABLE,
    PRIMARY_VIRTUAL,
    TAG_BARE,
    TAG_DEFAULTS,
    TAG_DEFAULTS_WITH_MAX,
    TAG_FREE_DEFAULTS,
    TAG_FREE_QUANTITY,
    TAG_HAS_BUNDLE,
    TAG_HAS_MODIFIERS,
    TAG_INTENSITY,
    TAG_IS_COMBO,
    TAG_MAX_UNIQUE,
    TAG_NO_DEFAULTS,
    TAG_NON_REMOVABLE,
    TAG_VIRTUAL_INGREDIENT,
    TAG_VOLUME_PRICING,
)
from .menu_overrides import merge_with_overrides
from .menu_refs import as_mapping, has_keys, resolve_ref
from .menu_types import ClassifiedProduct, Menu, StructuralFlags, VisibleProduct
from .visible_products import collect_visible_products

log = logging.getLogger(__name__)


# Ad hoc attribute names menus use for graduated options (Easy / Regular / Extra).
INTENSITY_ATTRIBUTES: Tuple[str, ...] = ("intensity", "portionSize", "Easy", "Regular", "Extra")


# ---------------------------------------------------------------------------
# Structural flags
# ---------------------------------------------------------------------------

def compute_flags(product: Mapping[str, Any]) -> StructuralFlags:
    related = product.get("relatedProducts")
    related = related if isinstance(related, Mapping) else {}
    return {
        "is_virtual": product.get("isVirtual") is True,
        "is_combo": product.get("isCombo") is True,
        "has_ingredient_refs": has_keys(product.get("ingredientRefs")),
        "has_modifier_group_refs": has_keys(product.get("modifierGroupRefs")),
        "has_alternatives": has_keys(related.get("alternatives")),
        "has_bundle_link": related.get("bundle") is not None,
    }


# ---------------------------------------------------------------------------
# Primary type
# ---------------------------------------------------------------------------

def classify_primary_type(flags: Mapping[str, bool]) -> str:
    """Map the structural flags to exactly one primary construct label."""
    ingredients = bool(flags.get("has_ingredient_refs"))
    alternatives = bool(flags.get("has_alternatives"))

    if flags.get("is_virtual") and not ingredients and not alternatives:
        return PRIMARY_VIRTUAL
    if alternatives:
        return PRIMARY_SIZED_CUSTOMIZABLE if ingredients else PRIMARY_SIZED
    return PRIMARY_CUSTOMIZABLE if ingredients else PRIMARY_LEAF


# ---------------------------------------------------------------------------
# Structural tags
# ---------------------------------------------------------------------------

def detect_structural_tags(flags: Mapping[str, bool]) -> List[str]:
    tags: List[str] = []
    if not flags.get("has_ingredient_refs") and not flags.get("has_modifier_group_refs"):
        tags.append(TAG_BARE)
    if flags.get("has_modifier_group_refs"):
        tags.append(TAG_HAS_MODIFIERS)
    if flags.get("has_bundle_link"):
        tags.append(TAG_HAS_BUNDLE)
    if flags.get("is_combo"):
        tags.append(TAG_IS_COMBO)
    if (
        flags.get("is_virtual")
        and flags.get("has_ingredient_refs")
        and not flags.get("has_alternatives")
    ):
        tags.append(TAG_VIRTUAL_INGREDIENT)
    return tags


# ---------------------------------------------------------------------------
# Behavioral tags
# ---------------------------------------------------------------------------

def _positive(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _has_intensity(child: Mapping[str, Any]) -> bool:
    return any(child.get(attr) for attr in INTENSITY_ATTRIBUTES)


def inspect_ingredient_group(menu: Menu, group: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Behavioral facts about one ingredient group.

    Each child is its edge override merged onto the resolved child entity
    (the override alone when the child does not resolve), so isDefault and
    intensity attributes are seen wherever they were set.
    """
    children = [
        merge_with_overrides(resolve_ref(menu, ref), override)
        for ref, override in as_mapping(group.get("childRefs")).items()
    ]
    default_count = sum(1 for c in children if c.get("isDefault") is True)

    sq = as_mapping(group.get("selectionQuantity"))
    min_q = sq.get("min")

    return {
        "child_count": len(children),
        "default_count": default_count,
        "has_defaults": default_count > 0,
        "has_no_defaults": default_count == 0 and len(children) > 0,
        "has_max": _positive(sq.get("max")),
        "has_free": _positive(sq.get("free")),
        "non_removable": (
            _positive(min_q) and default_count > 0 and min_q >= default_count
        ),
        "has_intensity": any(_has_intensity(c) for c in children),
    }


def detect_behavioral_tags(product: Mapping[str, Any], menu: Menu) -> List[str]:
    """
    Aggregate behavioral tags across all of a product's ingredient groups,
    plus the product-level markers read straight off the product.
    """
    any_defaults = False
    any_no_defaults = False
    non_removable = False
    has_max = False
    has_free = False
    intensity = False

    for ref in as_mapping(product.get("ingredientRefs")):
        group = resolve_ref(menu, ref)
        if group is None or not isinstance(group.get("childRefs"), Mapping):
            continue
        facts = inspect_ingredient_group(menu, group)
        any_defaults = any_defaults or facts["has_defaults"]
        any_no_defaults = any_no_defaults or facts["has_no_defaults"]
        non_removable = non_removable or facts["non_removable"]
        has_max = has_max or facts["has_max"]
        has_free = has_free or facts["has_free"]
        intensity = intensity or facts["has_intensity"]

    tags: List[str] = []
    if any_defaults:
        tags.append(TAG_DEFAULTS)
    if non_removable:
        tags.append(TAG_NON_REMOVABLE)
    if any_defaults and has_max:
        tags.append(TAG_DEFAULTS_WITH_MAX)
    if any_defaults and has_free:
        tags.append(TAG_FREE_DEFAULTS)
    if any_no_defaults and not any_defaults:
        tags.append(TAG_NO_DEFAULTS)
    if intensity:
        tags.append(TAG_INTENSITY)

    # product-level markers
    if product.get("maxUniqueChoices") is not None:
        tags.append(TAG_MAX_UNIQUE)
    if product.get("volumePrices") is not None or product.get("volumePricing") is not None:
        tags.append(TAG_VOLUME_PRICING)
    if has_free or product.get("freeQuantity") is not None:
        tags.append(TAG_FREE_QUANTITY)
    return tags


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_product(menu: Menu, visible: VisibleProduct) -> ClassifiedProduct:
    """Classify one collected product (bundle pass 1 included, pass 2 not)."""
    product = visible["product"]
    flags = compute_flags(product)

    record: ClassifiedProduct = {
        "ref": visible["ref"],
        "product": product,
        "primary_type": classify_primary_type(flags),
        "behavioral_tags": detect_behavioral_tags(product, menu),
        "structural_tags": detect_structural_tags(flags),
        "flags": flags,
        "category_ref": visible["category_ref"],
        "category_name": visible["category_name"],
        "main_category_ref": visible["main_category_ref"],
        "main_category_name": visible["main_category_name"],
    }
    if "parent_virtual_ref" in visible:
        record["parent_virtual_ref"] = visible["parent_virtual_ref"]
        record["parent_virtual_name"] = visible["parent_virtual_name"]

    target = get_bundle_target(menu, product, own_ref=visible["ref"])
    if target is not None:
        record["bundle_target_ref"] = target["ref"]
        record["bundle_target_name"] = target["name"]
    return record


def classify_all_products(menu: Optional[Menu]) -> List[ClassifiedProduct]:
    """
    Classify every visible product of the menu.

    Returns [] for a menu without a resolvable root category.
    """
    if not menu:
        return []
    classified = [classify_product(menu, v) for v in collect_visible_products(menu)]
    classified = attach_bundle_sources(classified)
    log.info(
        "Classified %d products for menu %r",
        len(classified),
        menu.get("displayName") or "",
    )
    return classified
