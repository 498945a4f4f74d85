# menugraph/menu_types.py
"""
Menugraph Types: normalized menu documents and classification records.

Two families of shapes live here:

- Menu document shapes (camelCase keys, exactly as they appear in the
  normalized menu.json the menu team publishes). These are read-only
  snapshots; nothing in menugraph mutates them.
- Classification output shapes (snake_case keys) produced by
  construct_classifier.classify_all_products and consumed by the stats,
  export, portal and CLI layers.

All entity relationships in a menu are expressed as reference strings
("products.cheeseburger", "categories.drinks", ...) keyed into one of the
five entity maps. There are no embedded object identities.
"""

from __future__ import annotations

from typing import Any, Dict, List, NotRequired, Optional, TypedDict


# ────────────────────────────────────────────────
# Menu document (input)
# ────────────────────────────────────────────────

Ref = str
Override = Dict[str, Any]          # per-edge partial attribute record
ChildRefs = Dict[Ref, Override]    # ref -> override (may be {} or None)


class Quantity(TypedDict, total=False):
    min: Optional[int]
    max: Optional[int]
    free: Optional[int]
    default: Optional[int]


class Category(TypedDict, total=False):
    displayName: str
    isAvailable: bool
    displayOrder: int
    childRefs: ChildRefs


class ProductGroup(TypedDict, total=False):
    displayName: str
    description: Optional[str]
    selectionQuantity: Quantity
    isRecipe: Any                  # bool, or "True"/"False" from Python exporters
    childRefs: ChildRefs


class Product(TypedDict, total=False):
    displayName: Optional[str]
    description: Optional[str]
    isAvailable: Optional[bool]
    isVirtual: bool
    isCombo: bool
    isDefault: bool
    price: float
    calories: float
    quantity: Quantity
    PLU: int
    ingredientRefs: Optional[ChildRefs]
    modifierGroupRefs: Optional[Dict[Ref, Any]]
    relatedProducts: Dict[str, Any]  # "alternatives" / "bundle" / productGroups.<id>


class ModifierGroup(TypedDict, total=False):
    displayName: str
    selectionQuantity: Quantity
    childRefs: ChildRefs


class Modifier(TypedDict, total=False):
    displayName: str
    price: float
    isDefault: bool
    isAvailable: bool
    quantity: Quantity


class Menu(TypedDict, total=False):
    displayName: str
    rootCategoryRef: Ref
    isAvailable: bool
    operationHours: Optional[Dict[str, Any]]
    categories: Dict[str, Category]
    products: Dict[str, Product]
    productGroups: Dict[str, ProductGroup]
    modifierGroups: Dict[str, ModifierGroup]
    modifiers: Dict[str, Modifier]


# ────────────────────────────────────────────────
# Traversal + classification (output)
# ────────────────────────────────────────────────

class StructuralFlags(TypedDict):
    is_virtual: bool
    is_combo: bool
    has_ingredient_refs: bool
    has_modifier_group_refs: bool
    has_alternatives: bool
    has_bundle_link: bool


class VisibleProduct(TypedDict):
    """
    One customer-reachable product found by the collector.
    """
    ref: Ref
    product: Dict[str, Any]
    category_ref: Ref
    category_name: str
    main_category_ref: Ref
    main_category_name: str
    parent_virtual_ref: NotRequired[Ref]
    parent_virtual_name: NotRequired[str]


class BundleSource(TypedDict):
    ref: Ref
    name: str


class ClassifiedProduct(TypedDict):
    """
    Output record per visible product.

    bundle_sources is only present when at least one other visible
    product bundles to this one.
    """
    ref: Ref
    product: Dict[str, Any]
    primary_type: str
    behavioral_tags: List[str]
    structural_tags: List[str]
    flags: StructuralFlags
    category_ref: Ref
    category_name: str
    main_category_ref: Ref
    main_category_name: str
    parent_virtual_ref: NotRequired[Ref]
    parent_virtual_name: NotRequired[str]
    bundle_target_ref: NotRequired[Ref]
    bundle_target_name: NotRequired[str]
    bundle_sources: NotRequired[List[BundleSource]]


class ConstructDef(TypedDict):
    id: str                 # label carried on classified records
    code: str               # construct number used by the menu team ("1AAA", "#6", ...)
    name: str
    short_name: str
    kind: str               # "primary" | "behavioral" | "structural" | "combo"
    description: str
    engineering_term: str
