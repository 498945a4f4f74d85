# menugraph/visible_products.py
"""
Visible-Product Collector

Produces the ordered, de-duplicated list of products a guest can actually
reach from the menu's root category. Products that only exist as recipe
components (lettuce, bun, ...) are never collected.

Walk:
  root category
    └─ each direct child = "main" category      (main_category_ref)
         └─ nested categories, any depth         (category_ref = where found)
              └─ products.<id>

  - Category refs are tracked in a single `visited` set for the whole run.
    A category is walked at most once, so category cycles (A → B → A)
    terminate and diamond-shaped trees do not emit twice. The walk keeps
    an explicit stack, so nesting depth never touches the interpreter's
    recursion limit.
  - Product refs are de-duplicated too; the first category that reaches a
    product owns it.
  - Product keys sitting directly under the root are recorded with the root
    as both their category and main category.

Virtual expansion:
  A virtual product (isVirtual = true) has no POS identity of its own; it
  fronts a productGroup of real sized products via
  relatedProducts.alternatives. For each collected virtual product we emit
  the members of those groups right after it, tagged with
  parent_virtual_ref / parent_virtual_name and inheriting the virtual
  product's category tags. Expansion is one level deep and only happens for
  virtual products. A non-virtual product with alternatives is classified
  as "Sized" but its alternatives are *not* collected.

Entry function: collect_visible_products(menu)

Browsing helpers behind the portal's product detail route:
get_virtual_product_alternatives, resolve_virtual_to_default,
get_parent_virtual_products.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from .menu_overrides import has_overrides, merge_with_overrides
from .menu_refs import (
    as_mapping,
    display_name,
    is_category_ref,
    is_product_group_ref,
    is_product_ref,
    make_ref,
    resolve_ref,
)
from .menu_types import Menu, Ref, VisibleProduct

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Category walk
# ---------------------------------------------------------------------------

def get_root_category(menu: Optional[Menu]) -> Optional[Dict[str, Any]]:
    if not menu:
        return None
    root_ref = menu.get("rootCategoryRef")
    if not root_ref:
        return None
    return resolve_ref(menu, root_ref)


def get_top_level_categories(menu: Optional[Menu]) -> List[Tuple[Ref, Dict[str, Any]]]:
    """Resolvable category children of the root, in childRefs order."""
    root = get_root_category(menu)
    if not root:
        return []
    out: List[Tuple[Ref, Dict[str, Any]]] = []
    for ref in as_mapping(root.get("childRefs")):
        if not is_category_ref(ref):
            continue
        category = resolve_ref(menu, ref)
        if category is not None:
            out.append((ref, category))
    return out


def _walk_category(
    menu: Menu,
    start_ref: Ref,
    visited: Set[Ref],
) -> Iterator[Tuple[Ref, Ref]]:
    """
    Depth-first, pre-order walk from start_ref.

    Yields (category_ref, product_ref) in the same order a recursive walk
    would. Categories already in `visited` are skipped.
    """
    if start_ref in visited:
        return
    visited.add(start_ref)

    stack: List[Tuple[Ref, Iterator[str]]] = []
    start = resolve_ref(menu, start_ref)
    if start is None:
        log.debug("Skipping unresolved category %s", start_ref)
        return
    stack.append((start_ref, iter(list(as_mapping(start.get("childRefs"))))))

    while stack:
        cat_ref, children = stack[-1]
        child_ref = next(children, None)
        if child_ref is None:
            stack.pop()
            continue

        if is_product_ref(child_ref):
            yield cat_ref, child_ref
        elif is_category_ref(child_ref):
            if child_ref in visited:
                continue
            visited.add(child_ref)
            sub = resolve_ref(menu, child_ref)
            if sub is None:
                log.debug("Skipping unresolved category %s (under %s)", child_ref, cat_ref)
                continue
            stack.append((child_ref, iter(list(as_mapping(sub.get("childRefs"))))))


def _category_pairs(menu: Menu) -> List[Tuple[Ref, Ref, Ref]]:
    """
    (main_category_ref, category_ref, product_ref) for every product
    reachable through the category tree, in walk order, duplicates kept.
    """
    root_ref = menu.get("rootCategoryRef")
    root = get_root_category(menu)
    if not root_ref or root is None:
        return []

    visited: Set[Ref] = {root_ref}
    pairs: List[Tuple[Ref, Ref, Ref]] = []
    for child_ref in as_mapping(root.get("childRefs")):
        if is_product_ref(child_ref):
            pairs.append((root_ref, root_ref, child_ref))
        elif is_category_ref(child_ref):
            for cat_ref, prod_ref in _walk_category(menu, child_ref, visited):
                pairs.append((child_ref, cat_ref, prod_ref))
    return pairs


# ---------------------------------------------------------------------------
# Virtual products → alternative groups
# ---------------------------------------------------------------------------

def _alternatives_group_refs(product: Dict[str, Any]) -> List[Ref]:
    """productGroup refs listed under relatedProducts.alternatives."""
    related = as_mapping(product.get("relatedProducts"))
    alternatives = as_mapping(related.get("alternatives"))
    return [ref for ref in alternatives if is_product_group_ref(ref)]


def related_group_refs(product: Dict[str, Any]) -> List[Ref]:
    """
    Every productGroup ref hanging off relatedProducts: direct keys
    ("productGroups.carrier-abc": {}) and keys nested inside named
    relations ("alternatives": {"productGroups.size-abc": {}}).
    """
    refs: List[Ref] = []
    for key, value in as_mapping(product.get("relatedProducts")).items():
        if is_product_group_ref(key) and key not in refs:
            refs.append(key)
        for inner in as_mapping(value):
            if is_product_group_ref(inner) and inner not in refs:
                refs.append(inner)
    return refs


def _resolve_alternative_children(menu: Menu, group: Dict[str, Any]) -> List[Dict[str, Any]]:
    variants: List[Dict[str, Any]] = []
    for ref, override in as_mapping(group.get("childRefs")).items():
        if not is_product_ref(ref):
            continue
        base = resolve_ref(menu, ref)
        if base is None:
            continue
        ov = as_mapping(override)
        variants.append({
            "ref": ref,
            "product": merge_with_overrides(base, ov),
            "overrides": dict(ov) if has_overrides(ov) else None,
            "is_default": bool(ov.get("isDefault") or base.get("isDefault")),
        })
    return variants


def get_virtual_product_alternatives(menu: Menu, product: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    For a virtual product, the size/selection productGroups it fronts and
    their resolved members:

        [{"group_ref", "group", "variants": [{"ref", "product",
          "overrides", "is_default"}, ...]}, ...]

    Returns [] for non-virtual products.
    """
    if product.get("isVirtual") is not True:
        return []
    out: List[Dict[str, Any]] = []
    for group_ref in related_group_refs(product):
        group = resolve_ref(menu, group_ref)
        if group is None or not as_mapping(group.get("childRefs")):
            continue
        out.append({
            "group_ref": group_ref,
            "group": group,
            "variants": _resolve_alternative_children(menu, group),
        })
    return out


def resolve_virtual_to_default(menu: Menu, product: Dict[str, Any]) -> Optional[Tuple[Ref, Dict[str, Any]]]:
    """
    The real product a virtual product should display as: the first
    variant marked default in any of its groups, else the first variant
    of the first group. None when nothing resolves.
    """
    alternatives = get_virtual_product_alternatives(menu, product)
    for alt in alternatives:
        for variant in alt["variants"]:
            if variant["is_default"]:
                return variant["ref"], variant["product"]
    for alt in alternatives:
        if alt["variants"]:
            first = alt["variants"][0]
            return first["ref"], first["product"]
    return None


def get_parent_virtual_products(menu: Optional[Menu], product_ref: Ref) -> List[Dict[str, Any]]:
    """
    Menu-wide reverse lookup: the virtual products whose related
    productGroups list product_ref as a child.

    Returns [{"virtual_ref", "virtual_product", "group_name"}], one entry
    per (virtual product, group) pair. group_name falls back to "Size".
    """
    if not menu:
        return []
    parent_groups: Set[Ref] = set()
    for key, group in as_mapping(menu.get("productGroups")).items():
        if isinstance(group, dict) and product_ref in as_mapping(group.get("childRefs")):
            parent_groups.add(make_ref("productGroups", key))
    if not parent_groups:
        return []

    out: List[Dict[str, Any]] = []
    for key, product in as_mapping(menu.get("products")).items():
        if not isinstance(product, dict) or product.get("isVirtual") is not True:
            continue
        for group_ref in related_group_refs(product):
            if group_ref not in parent_groups:
                continue
            out.append({
                "virtual_ref": make_ref("products", key),
                "virtual_product": product,
                "group_name": display_name(resolve_ref(menu, group_ref), "Size"),
            })
    return out


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def collect_visible_products(menu: Optional[Menu]) -> List[VisibleProduct]:
    """
    Ordered, de-duplicated customer-facing products of the menu.

    Returns [] when the menu has no (resolvable) root category.
    """
    if not menu:
        return []

    pairs = _category_pairs(menu)
    if not pairs:
        return []

    # Category-level products claim their refs before any virtual expansion,
    # so a product listed in a category keeps its own category tags even if
    # it is also a size variant of an earlier virtual product.
    seen: Set[Ref] = set()
    entries: List[Tuple[Ref, Ref, Ref, Dict[str, Any]]] = []
    for main_ref, cat_ref, prod_ref in pairs:
        if prod_ref in seen:
            continue
        product = resolve_ref(menu, prod_ref)
        if product is None:
            log.debug("Skipping dangling product ref %s in %s", prod_ref, cat_ref)
            continue
        seen.add(prod_ref)
        entries.append((main_ref, cat_ref, prod_ref, product))

    names: Dict[Ref, str] = {}

    def _name_of(ref: Ref) -> str:
        if ref not in names:
            names[ref] = display_name(resolve_ref(menu, ref), ref)
        return names[ref]

    out: List[VisibleProduct] = []
    for main_ref, cat_ref, prod_ref, product in entries:
        record: VisibleProduct = {
            "ref": prod_ref,
            "product": product,
            "category_ref": cat_ref,
            "category_name": _name_of(cat_ref),
            "main_category_ref": main_ref,
            "main_category_name": _name_of(main_ref),
        }
        out.append(record)

        if product.get("isVirtual") is not True:
            continue

        parent_name = display_name(product, prod_ref)
        for group_ref in _alternatives_group_refs(product):
            group = resolve_ref(menu, group_ref)
            if group is None:
                log.debug("Virtual %s points at missing group %s", prod_ref, group_ref)
                continue
            for variant in _resolve_alternative_children(menu, group):
                if variant["ref"] in seen:
                    continue
                seen.add(variant["ref"])
                out.append({
                    "ref": variant["ref"],
                    "product": variant["product"],
                    "category_ref": cat_ref,
                    "category_name": record["category_name"],
                    "main_category_ref": main_ref,
                    "main_category_name": record["main_category_name"],
                    "parent_virtual_ref": prod_ref,
                    "parent_virtual_name": parent_name,
                })

    log.debug("Collected %d visible products (%d from categories)", len(out), len(entries))
    return out
