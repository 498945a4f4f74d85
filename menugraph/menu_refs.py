# menugraph/menu_refs.py
"""
Reference Resolver

Menu entities point at each other with namespaced reference strings:

    "products.american-cheese-burger"
    "categories.burgers"
    "productGroups.size-cola"
    "modifierGroups.sauces"
    "modifiers.ranch"

The prefix (everything before the first ".") picks one of the five entity
maps on the menu; the rest is the key inside that map. Ids may themselves
contain dots, so only the first one splits.

Menus in the wild routinely carry dangling references. resolve_ref()
returns None for anything it cannot find and callers skip it; nothing in
this module raises on bad data.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from .menu_types import Menu, Ref


NAMESPACES: Tuple[str, ...] = (
    "categories",
    "products",
    "productGroups",
    "modifierGroups",
    "modifiers",
)

CATEGORY_PREFIX = "categories."
PRODUCT_PREFIX = "products."
PRODUCT_GROUP_PREFIX = "productGroups."
MODIFIER_GROUP_PREFIX = "modifierGroups."
MODIFIER_PREFIX = "modifiers."


# ---------------------------------------------------------------------------
# Ref string helpers
# ---------------------------------------------------------------------------

def split_ref(ref: Any) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a ref on its first dot.

    Returns (namespace, id), or (None, None) when the value is not a
    string or has no dot.
    """
    if not isinstance(ref, str):
        return None, None
    namespace, sep, key = ref.partition(".")
    if not sep:
        return None, None
    return namespace, key


def ref_namespace(ref: str) -> str:
    """'products.burger' -> 'products'. A ref without a dot is returned as-is."""
    namespace, _ = split_ref(ref)
    return namespace if namespace is not None else ref


def ref_id(ref: str) -> str:
    """'products.burger' -> 'burger'. A ref without a dot is returned as-is."""
    _, key = split_ref(ref)
    return key if key is not None else ref


def make_ref(namespace: str, key: str) -> Ref:
    return f"{namespace}.{key}"


def is_category_ref(ref: Any) -> bool:
    return isinstance(ref, str) and ref.startswith(CATEGORY_PREFIX)


def is_product_ref(ref: Any) -> bool:
    return isinstance(ref, str) and ref.startswith(PRODUCT_PREFIX)


def is_product_group_ref(ref: Any) -> bool:
    return isinstance(ref, str) and ref.startswith(PRODUCT_GROUP_PREFIX)


def is_modifier_group_ref(ref: Any) -> bool:
    return isinstance(ref, str) and ref.startswith(MODIFIER_GROUP_PREFIX)


def is_modifier_ref(ref: Any) -> bool:
    return isinstance(ref, str) and ref.startswith(MODIFIER_PREFIX)


# ---------------------------------------------------------------------------
# Value helpers shared across the engine
# ---------------------------------------------------------------------------

def has_keys(value: Any) -> bool:
    """True for a non-null mapping with at least one key."""
    return isinstance(value, Mapping) and len(value) > 0


def as_mapping(value: Any) -> Dict[str, Any]:
    """Return value when it is a mapping, else an empty dict (null, lists, strings)."""
    if isinstance(value, dict):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def display_name(entity: Optional[Mapping[str, Any]], fallback: str) -> str:
    """
    Human label for an entity: its displayName, or the fallback (usually
    the ref) when the name is missing or blank.
    """
    if entity:
        name = entity.get("displayName")
        if isinstance(name, str) and name.strip():
            return name
    return fallback


def is_recipe_group(group: Optional[Mapping[str, Any]]) -> bool:
    """
    isRecipe arrives as a real boolean or, from some Python exporters,
    as the string "True"/"False".
    """
    if not group:
        return False
    flag = group.get("isRecipe")
    return flag is True or flag == "True"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_ref(menu: Optional[Menu], ref: Any) -> Optional[Dict[str, Any]]:
    """
    Resolve a ref to the entity it names.

    The namespace picks the map; cross-namespace lookups always fail
    (a product id under "categories." is not found). Returns None for
    unknown namespaces, missing maps, missing keys and non-dict entries.
    """
    if not menu:
        return None
    namespace, key = split_ref(ref)
    if namespace not in NAMESPACES:
        return None
    entity_map = menu.get(namespace)
    if not isinstance(entity_map, Mapping):
        return None
    entity = entity_map.get(key)
    return entity if isinstance(entity, dict) else None
