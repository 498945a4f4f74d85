#!/usr/bin/env python3
"""
Run with:
  python scripts/classify_menu.py path/to/menu.json
  python scripts/classify_menu.py menu.json --format csv --output constructs.csv
  python scripts/classify_menu.py menu.json --type Sized --tag has-modifiers
  python scripts/classify_menu.py menu.json --quality

Classifies every visible product of a normalized menu document and prints
a summary table (default), the full JSON records, or the audit CSV.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from menugraph.construct_classifier import classify_all_products
from menugraph.construct_export import export_csv_bytes
from menugraph.construct_stats import build_stats, filter_products
from menugraph.menu_loader import MenuLoadError, load_menu
from menugraph.menu_overrides import strip_merge_markers
from menugraph.menu_refs import display_name
from menugraph.quality_checks import build_quality_report


def _print_table(items, stats) -> None:
    overview = stats["overview"]
    print(f"Menu: {overview['display_name'] or '(unnamed)'}  "
          f"visible products: {stats['visible_products']}")
    print()
    print("Primary types:")
    for row in stats["primary_types"]:
        print(f"  {row['code']:<5} {row['id']:<20} {row['count']}")
    if stats["behavioral_tags"]:
        print("Behavioral tags:")
        for row in stats["behavioral_tags"]:
            print(f"  {row['code']:<5} {row['id']:<24} {row['count']}")
    if stats["structural_tags"]:
        print("Structural tags:")
        for row in stats["structural_tags"]:
            print(f"  {row['code']:<5} {row['id']:<24} {row['count']}")
    print()
    for it in items:
        name = display_name(it["product"], it["ref"])
        tags = ", ".join(it["structural_tags"] + it["behavioral_tags"])
        parent = f"  (size of {it['parent_virtual_ref']})" if "parent_virtual_ref" in it else ""
        print(f"  {it['primary_type']:<20} {name:<32} [{it['main_category_name']}] {tags}{parent}")


def _print_quality(report, out=None) -> None:
    out = out or sys.stdout
    counts = report["counts"]
    print(file=out)
    print(f"Quality issues: {report['issue_total']}", file=out)
    for key, n in counts.items():
        print(f"  {key:<34} {n}", file=out)
    for entry in report["virtual_with_ingredient_refs"]:
        print(f"  [virtual+ingredients] {entry['product_ref']}", file=out)
    for entry in report["orphaned_virtual_products"]:
        print(f"  [orphaned virtual]    {entry['product_ref']}", file=out)
    for entry in report["virtual_groups_missing_default"]:
        groups = ", ".join(g["group_ref"] for g in entry["groups"])
        print(f"  [no default]          {entry['product_ref']}: {groups}", file=out)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("MENUGRAPH_LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    ap = argparse.ArgumentParser(description="Classify menu products into structural constructs.")
    ap.add_argument("menu", type=str, help="Path to a normalized menu.json")
    ap.add_argument("--format", choices=("table", "json", "csv"), default="table",
                    help="Output format (default: table)")
    ap.add_argument("--quality", action="store_true", help="Also run the data-quality checks")
    ap.add_argument("--type", dest="primary_type", default=None, help="Only products of this primary type")
    ap.add_argument("--tag", default=None, help="Only products carrying this behavioral or structural tag")
    ap.add_argument("--output", type=str, default=None, help="Write to this file instead of stdout")
    args = ap.parse_args(argv)

    try:
        menu = load_menu(args.menu)
    except MenuLoadError as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1

    classified = classify_all_products(menu)
    items = filter_products(classified, primary_type=args.primary_type)
    if args.tag:
        items = [it for it in items
                 if args.tag in it["behavioral_tags"] or args.tag in it["structural_tags"]]

    report = build_quality_report(menu) if args.quality else None

    if args.format == "csv":
        data = export_csv_bytes(items)
        if args.output:
            Path(args.output).write_bytes(data)
            print(f"[OK] Wrote {len(items)} rows → {args.output}")
        else:
            sys.stdout.write(data.decode("utf-8-sig"))
        if report is not None:
            # stdout carries the CSV stream unless it went to a file
            _print_quality(report, out=sys.stdout if args.output else sys.stderr)
        return 0

    if args.format == "json":
        payload = {
            "total": len(classified),
            "count": len(items),
            "products": [{**it, "product": strip_merge_markers(it["product"])} for it in items],
        }
        if report is not None:
            payload["quality"] = report
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(text + "\n", encoding="utf-8")
            print(f"[OK] Wrote {len(items)} products → {args.output}")
        else:
            print(text)
        return 0

    _print_table(items, build_stats(menu, items))
    if report is not None:
        _print_quality(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
