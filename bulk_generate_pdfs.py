import argparse
import json
from pathlib import Path

from config import Config
from models import BusinessProfile, Invoice
from output import invoice_filename, to_file


def _unique_name(name: str, index: int, used: set) -> str:
    """Blank or repeated invoice numbers get the record index appended."""
    stem = name[:-4]
    candidate = name
    n = index
    while candidate in used:
        candidate = f"{stem}-{n}.pdf"
        n += 1
    used.add(candidate)
    return candidate


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bulk generate invoice PDFs from a JSON export.")
    parser.add_argument("source", help="JSON file: {\"profile\": {...}, \"invoices\": [...]}")
    parser.add_argument("--out", type=str, default="", help="Output directory (defaults to EXPORTS_DIR).")
    parser.add_argument("--year", type=str, default="", help="Only generate PDFs for invoices dated in a given year (YYYY).")
    args = parser.parse_args(argv)

    target_year = (args.year or "").strip()
    if target_year and not (target_year.isdigit() and len(target_year) == 4):
        raise SystemExit("Year must be 4 digits, e.g. --year 2025")

    out_dir = Path(args.out or Config.EXPORTS_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)

    with open(args.source, encoding="utf-8") as f:
        raw = json.load(f)

    profile = BusinessProfile.from_dict(raw.get("profile") or {})
    records = raw.get("invoices") or []
    if target_year:
        records = [r for r in records if str(r.get("date") or "").startswith(target_year)]

    if not records:
        print("No invoices found for the given filter.")
        return 0

    total = len(records)
    generated = 0
    failed = 0
    used_names = set()

    for i, rec in enumerate(records, start=1):
        label = rec.get("number") or "(no number)"
        try:
            inv = Invoice.from_dict(rec, default_currency=Config.DEFAULT_CURRENCY)
            name = _unique_name(invoice_filename(inv), i, used_names)
            path = to_file(inv, profile, out_dir, filename=name)
            generated += 1
            print(f"[{i}/{total}] DONE  {label} -> {path}")
        except Exception as e:
            failed += 1
            print(f"[{i}/{total}] FAIL  {label}  ({e})")

    print("\nBulk PDF generation complete.")
    print(f"Generated: {generated}")
    print(f"Failed:    {failed}")
    print(f"Exports:   {out_dir}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
