# menugraph/construct_export.py
"""
Construct exports (CSV / XLSX) for audit spreadsheets.

One flat row per classified product. Tag lists are joined with "|" so the
CSV stays one-row-per-product and round-trips through Excel untouched.
"""

from __future__ import annotations

import csv
import io
import re
from typing import Any, Dict, Iterable, List

from openpyxl import Workbook

from .construct_catalog import construct_code
from .menu_refs import display_name
from .menu_types import ClassifiedProduct

EXPORT_COLUMNS: List[str] = [
    "ref",
    "name",
    "primary_type",
    "primary_code",
    "behavioral_tags",
    "structural_tags",
    "main_category",
    "category",
    "parent_virtual_ref",
    "bundle_target_ref",
    "bundle_source_count",
    "price",
    "is_available",
]


def classified_to_rows(items: Iterable[ClassifiedProduct]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for it in items:
        product = it["product"]
        rows.append({
            "ref": it["ref"],
            "name": display_name(product, it["ref"]),
            "primary_type": it["primary_type"],
            "primary_code": construct_code(it["primary_type"]),
            "behavioral_tags": "|".join(it["behavioral_tags"]),
            "structural_tags": "|".join(it["structural_tags"]),
            "main_category": it["main_category_name"],
            "category": it["category_name"],
            "parent_virtual_ref": it.get("parent_virtual_ref", ""),
            "bundle_target_ref": it.get("bundle_target_ref", ""),
            "bundle_source_count": len(it.get("bundle_sources") or []),
            "price": product.get("price"),
            "is_available": product.get("isAvailable"),
        })
    return rows


def export_csv_bytes(items: Iterable[ClassifiedProduct]) -> bytes:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for r in classified_to_rows(items):
        writer.writerow({k: ("" if r.get(k) is None else r.get(k)) for k in EXPORT_COLUMNS})
    # BOM so Excel opens it as UTF-8
    return buf.getvalue().encode("utf-8-sig")


def export_xlsx_bytes(items: Iterable[ClassifiedProduct], title: str = "Constructs") -> bytes:
    wb = Workbook()
    ws = wb.active
    # Excel rejects []:*?/\ in sheet names
    ws.title = (re.sub(r"[\[\]:*?/\\]", " ", title or "").strip() or "Constructs")[:31]

    ws.append(EXPORT_COLUMNS)
    for r in classified_to_rows(items):
        ws.append(["" if r.get(k) is None else r.get(k) for k in EXPORT_COLUMNS])

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
