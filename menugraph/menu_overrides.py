# menugraph/menu_overrides.py
"""
Override Merger

A childRefs / ingredientRefs map carries a small override record on each
edge:

    "productGroups.size-cola": {
        "childRefs": {
            "products.sm-cola": {},
            "products.med-cola": {"isDefault": true},
        }
    }

Here med-cola is a default *in this group only*. The merge rule is a plain
shallow merge where the edge wins:

    merge(base, override) = {**base, **override}

The merged dict keeps the original override under "_overrides" so the
caller can tell inherited fields from overridden ones. An empty override
leaves the base untouched (copied, never aliased). An override whose base
cannot be resolved is returned on its own and tagged "_overrides_only";
it is never padded out into a made-up entity.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .menu_refs import as_mapping, resolve_ref
from .menu_types import Menu, Override

OVERRIDES_KEY = "_overrides"
OVERRIDES_ONLY_KEY = "_overrides_only"


def has_overrides(override: Any) -> bool:
    """An override is present iff it is a mapping with at least one key."""
    return isinstance(override, Mapping) and len(override) > 0


def merge_with_overrides(
    base: Optional[Mapping[str, Any]],
    override: Optional[Override],
) -> Dict[str, Any]:
    """
    Combine a resolved entity with the override carried on the edge.

    - base missing       -> {**override, "_overrides_only": True}
    - override empty     -> dict(base)
    - otherwise          -> {**base, **override, "_overrides": override}

    Neither input is mutated.
    """
    ov = as_mapping(override)
    present = has_overrides(ov)

    if base is None:
        merged: Dict[str, Any] = dict(ov)
        merged[OVERRIDES_ONLY_KEY] = True
        if present:
            merged[OVERRIDES_KEY] = dict(ov)
        return merged

    if not present:
        return dict(base)

    merged = {**base, **ov}
    merged[OVERRIDES_KEY] = dict(ov)
    return merged


def resolve_merged(
    menu: Optional[Menu],
    ref: str,
    override: Optional[Override],
) -> Optional[Dict[str, Any]]:
    """
    Resolve ref and merge the edge override on top.

    Returns None when the base entity cannot be resolved; callers that
    still want the override on its own use merge_with_overrides(None, ...).
    """
    base = resolve_ref(menu, ref)
    if base is None:
        return None
    return merge_with_overrides(base, override)


def overridden_fields(merged: Mapping[str, Any]) -> Dict[str, Any]:
    """The override record that produced merged ({} when nothing was overridden)."""
    return dict(as_mapping(merged.get(OVERRIDES_KEY)))


def strip_merge_markers(merged: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of merged without the bookkeeping keys (for export / JSON output)."""
    return {k: v for k, v in merged.items() if k not in (OVERRIDES_KEY, OVERRIDES_ONLY_KEY)}
