# portal/app.py
from flask import Flask, jsonify, request, make_response

# --- Standard libs & typing ---
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from werkzeug.exceptions import RequestEntityTooLarge

# ------------------------
# Paths
# ------------------------
ROOT = Path(__file__).resolve().parents[1]

# Make project root importable so we can import menugraph.*
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

# --- Load .env if available ---
from dotenv import load_dotenv
load_dotenv(ROOT / ".env")

from menugraph.bundle_links import get_bundle_sources
from menugraph.construct_catalog import (
    BEHAVIORAL_TAGS,
    COMBO_CONSTRUCTS,
    PRIMARY_TYPES,
    STRUCTURAL_TAGS,
)
from menugraph.construct_classifier import classify_all_products
from menugraph.construct_export import export_csv_bytes, export_xlsx_bytes
from menugraph.construct_stats import build_stats, filter_products
from menugraph.menu_loader import MenuLoadError, parse_menu
from menugraph.menu_overrides import strip_merge_markers
from menugraph.menu_refs import display_name, is_product_ref, resolve_ref
from menugraph.menu_types import ClassifiedProduct, Menu
from menugraph.quality_checks import build_quality_report
from menugraph.visible_products import (
    get_parent_virtual_products,
    get_virtual_product_alternatives,
    resolve_virtual_to_default,
)

log = logging.getLogger(__name__)

# ------------------------
# App & Config
# ------------------------
app = Flask(__name__)

app.config["SECRET_KEY"] = os.getenv("MENUGRAPH_SECRET_KEY") or "dev-secret-change-me"
try:
    _max_mb = int(os.getenv("MENUGRAPH_MAX_UPLOAD_MB") or "20")
except ValueError:
    _max_mb = 20
app.config["MAX_CONTENT_LENGTH"] = _max_mb * 1024 * 1024
app.json.sort_keys = False


# ------------------------
# Helpers
# ------------------------
def _error(message: str, status: int = 400):
    return jsonify({"ok": False, "error": message}), status


def _menu_from_request() -> Tuple[Optional[Menu], Optional[str]]:
    """
    Pull the menu document out of the request body.

    Returns (menu, None) or (None, error_message).
    """
    data = request.get_json(silent=True)
    if data is None:
        return None, "request body must be a JSON menu document"
    try:
        return parse_menu(data), None
    except MenuLoadError as e:
        log.info("Rejected menu payload on %s: %s", request.path, e)
        return None, str(e)


def _product_json(item: ClassifiedProduct) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(item)
    out["product"] = strip_merge_markers(item["product"])
    return out


def _filters_from_args() -> Dict[str, Optional[str]]:
    return {
        "primary_type": request.args.get("primary_type") or None,
        "behavioral_tag": request.args.get("behavioral_tag") or None,
        "structural_tag": request.args.get("structural_tag") or None,
        "category_ref": request.args.get("category") or None,
        "search": request.args.get("q") or None,
    }


def _download(data: bytes, content_type: str, filename: str):
    resp = make_response(data)
    resp.headers["Content-Type"] = content_type
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


def _export_basename(menu: Menu) -> str:
    name = (menu.get("displayName") or "menu").strip() or "menu"
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in name)
    return f"{safe}_constructs"


@app.errorhandler(RequestEntityTooLarge)
def _too_large(_e):
    return _error("Menu document too large. Raise MENUGRAPH_MAX_UPLOAD_MB.", 413)


@app.errorhandler(500)
def _server_error(e):
    log.exception("Unhandled error on %s", request.path)
    return _error("Internal server error", 500)


# ------------------------
# Routes
# ------------------------
@app.get("/health")
def health():
    return jsonify({"ok": True, "service": "menugraph"})


@app.get("/api/constructs/catalog")
def constructs_catalog():
    return jsonify({
        "ok": True,
        "primary_types": PRIMARY_TYPES,
        "behavioral_tags": BEHAVIORAL_TAGS,
        "structural_tags": STRUCTURAL_TAGS,
        "combo_constructs": COMBO_CONSTRUCTS,
    })


@app.post("/api/constructs/classify")
def constructs_classify():
    menu, err = _menu_from_request()
    if err:
        return _error(err)
    classified = classify_all_products(menu)
    filtered = filter_products(classified, **_filters_from_args())
    return jsonify({
        "ok": True,
        "total": len(classified),
        "count": len(filtered),
        "products": [_product_json(it) for it in filtered],
    })


@app.post("/api/constructs/stats")
def constructs_stats():
    menu, err = _menu_from_request()
    if err:
        return _error(err)
    classified = classify_all_products(menu)
    return jsonify({"ok": True, **build_stats(menu, classified)})


@app.post("/api/constructs/quality")
def constructs_quality():
    menu, err = _menu_from_request()
    if err:
        return _error(err)
    return jsonify({"ok": True, **build_quality_report(menu)})


@app.post("/api/constructs/product")
def constructs_product():
    """
    Detail view for one product: its classification (when visible), the
    size groups it fronts, the virtual products that front it, and the
    products that bundle to it.
    """
    menu, err = _menu_from_request()
    if err:
        return _error(err)
    ref = (request.args.get("ref") or "").strip()
    if not is_product_ref(ref):
        return _error("ref query parameter must be a products.<id> reference")
    product = resolve_ref(menu, ref)
    if product is None:
        return _error(f"product not found: {ref}", 404)

    record = next((it for it in classify_all_products(menu) if it["ref"] == ref), None)
    default = resolve_virtual_to_default(menu, product)
    return jsonify({
        "ok": True,
        "ref": ref,
        "product": product,
        "classification": _product_json(record) if record else None,
        "alternatives": [
            {
                "group_ref": alt["group_ref"],
                "group_name": display_name(alt["group"], alt["group_ref"]),
                "variants": [
                    {"ref": v["ref"], "name": display_name(v["product"], v["ref"]), "is_default": v["is_default"]}
                    for v in alt["variants"]
                ],
            }
            for alt in get_virtual_product_alternatives(menu, product)
        ],
        "default_variant": (
            {"ref": default[0], "name": display_name(default[1], default[0])} if default else None
        ),
        "parent_virtual_products": [
            {
                "virtual_ref": p["virtual_ref"],
                "name": display_name(p["virtual_product"], p["virtual_ref"]),
                "group_name": p["group_name"],
            }
            for p in get_parent_virtual_products(menu, ref)
        ],
        "bundle_sources": [
            {"ref": s["ref"], "name": s["name"]} for s in get_bundle_sources(menu, ref)
        ],
    })


@app.post("/api/constructs/export.csv")
def constructs_export_csv():
    menu, err = _menu_from_request()
    if err:
        return _error(err)
    classified = filter_products(classify_all_products(menu), **_filters_from_args())
    return _download(
        export_csv_bytes(classified),
        "text/csv; charset=utf-8",
        f"{_export_basename(menu)}.csv",
    )


@app.post("/api/constructs/export.xlsx")
def constructs_export_xlsx():
    menu, err = _menu_from_request()
    if err:
        return _error(err)
    classified = filter_products(classify_all_products(menu), **_filters_from_args())
    return _download(
        export_xlsx_bytes(classified, title=menu.get("displayName") or "Constructs"),
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        f"{_export_basename(menu)}.xlsx",
    )


if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("MENUGRAPH_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
