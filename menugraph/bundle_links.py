# menugraph/bundle_links.py
"""
Bundle Link Resolver

A standalone product can point at its combo/meal counterpart:

    "gyro": {"relatedProducts": {"bundle": "products.gyro-meal"}}

Pass 1 (per product, during classification): get_bundle_target() turns
that pointer into (ref, product, name). Only a string starting with
"products." that resolves to a different product counts; anything else
(an object, a dangling ref, a productGroups ref, a self-link) is simply
not recorded.

Pass 2 (after every visible product is classified): attach_bundle_sources()
inverts the forward links into target -> [sources] and writes
`bundle_sources` onto each target record. A record with no incoming links
gets no key at all, so presence alone means "has at least one source".

get_bundle_sources() is the menu-wide reverse lookup used by the portal's
product detail route; it also sees products that are not visible.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .menu_refs import as_mapping, display_name, is_product_ref, make_ref, resolve_ref
from .menu_types import BundleSource, ClassifiedProduct, Menu, Ref

log = logging.getLogger(__name__)


def bundle_pointer(product: Dict[str, Any]) -> Optional[Ref]:
    """The raw relatedProducts.bundle value when it looks like a product ref."""
    value = as_mapping(product.get("relatedProducts")).get("bundle")
    if isinstance(value, str) and is_product_ref(value):
        return value
    return None


def get_bundle_target(
    menu: Menu,
    product: Dict[str, Any],
    own_ref: Optional[Ref] = None,
) -> Optional[Dict[str, Any]]:
    """
    Resolve a product's forward bundle link.

    Returns {"ref", "product", "name"} or None.
    """
    target_ref = bundle_pointer(product)
    if target_ref is None:
        return None
    if own_ref is not None and target_ref == own_ref:
        log.debug("Ignoring self bundle link on %s", own_ref)
        return None
    target = resolve_ref(menu, target_ref)
    if target is None:
        log.debug("Bundle link %s -> %s does not resolve", own_ref, target_ref)
        return None
    return {
        "ref": target_ref,
        "product": target,
        "name": display_name(target, target_ref),
    }


def build_bundle_index(items: List[ClassifiedProduct]) -> Dict[Ref, List[BundleSource]]:
    """target ref -> sources, in classification order."""
    index: Dict[Ref, List[BundleSource]] = {}
    for item in items:
        target_ref = item.get("bundle_target_ref")
        if not target_ref:
            continue
        index.setdefault(target_ref, []).append({
            "ref": item["ref"],
            "name": display_name(item["product"], item["ref"]),
        })
    return index


def attach_bundle_sources(items: List[ClassifiedProduct]) -> List[ClassifiedProduct]:
    """
    Second pass: write bundle_sources onto every target record that has at
    least one source. Records are new dicts; the input list is not touched.
    """
    index = build_bundle_index(items)
    out: List[ClassifiedProduct] = []
    for item in items:
        sources = index.get(item["ref"])
        if sources:
            item = {**item, "bundle_sources": list(sources)}  # type: ignore[assignment]
        out.append(item)
    return out


def get_bundle_sources(menu: Menu, product_ref: Ref) -> List[Dict[str, Any]]:
    """
    Menu-wide reverse lookup for a single product, visible or not.

    Returns [{"ref", "product", "name"}] for every product whose bundle
    pointer is product_ref.
    """
    out: List[Dict[str, Any]] = []
    for key, product in as_mapping(menu.get("products")).items():
        if not isinstance(product, dict):
            continue
        if bundle_pointer(product) != product_ref:
            continue
        ref = make_ref("products", key)
        if ref == product_ref:
            continue
        out.append({"ref": ref, "product": product, "name": display_name(product, ref)})
    return out
