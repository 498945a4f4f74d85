# menugraph/menu_loader.py
"""
Contracts & loading for normalized menu documents (menu.json).

The classifier itself does no I/O. This module is the thin layer in front
of it used by the portal and the CLI:

  - validate_menu_payload(data) -> (ok, error)
      Shape checks only. Dangling references are NOT errors; the engine
      reports and skips those itself.
  - load_menu_json(text) / load_menu(path)
      Parse + validate; raise MenuLoadError with the first problem found.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Tuple, Union

from .menu_refs import NAMESPACES
from .menu_types import Menu

log = logging.getLogger(__name__)

# Per-entity fields that must be an object (or null) when present.
_MAPPING_FIELDS = ("childRefs", "ingredientRefs", "modifierGroupRefs", "relatedProducts")


class MenuLoadError(ValueError):
    """Menu document could not be parsed or failed shape validation."""


def validate_menu_payload(data: Any) -> Tuple[bool, str]:
    if not isinstance(data, dict):
        return False, "menu must be a JSON object"

    root_ref = data.get("rootCategoryRef")
    if root_ref is not None and not isinstance(root_ref, str):
        return False, "rootCategoryRef must be a string"

    display = data.get("displayName")
    if display is not None and not isinstance(display, str):
        return False, "displayName must be a string"

    for namespace in NAMESPACES:
        if namespace not in data or data[namespace] is None:
            continue
        entity_map = data[namespace]
        if not isinstance(entity_map, dict):
            return False, f"{namespace} must be an object"
        for key, entity in entity_map.items():
            if not isinstance(entity, dict):
                return False, f"{namespace}.{key} must be an object"
            for field in _MAPPING_FIELDS:
                if field in entity and entity[field] is not None and not isinstance(entity[field], dict):
                    return False, f"{namespace}.{key}.{field} must be an object or null"

    return True, ""


def parse_menu(data: Any) -> Menu:
    """Validate an already-decoded document and return it as a Menu."""
    ok, err = validate_menu_payload(data)
    if not ok:
        raise MenuLoadError(f"invalid menu: {err}")
    return data


def load_menu_json(text: Union[str, bytes]) -> Menu:
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MenuLoadError(f"menu is not UTF-8: {e}") from e
    else:
        text = text.lstrip("\ufeff")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MenuLoadError(f"menu is not valid JSON: {e}") from e
    return parse_menu(data)


def load_menu(path: Union[str, Path]) -> Menu:
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise MenuLoadError(f"cannot read menu file {p}: {e}") from e
    menu = load_menu_json(raw)
    log.info("Loaded menu %s (%d products)", p.name, len(menu.get("products") or {}))
    return menu

