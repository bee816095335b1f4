"""Import credit entries from a JSON export of the old document store.

The export is either a JSON array of documents or one document per line
(``mongoexport`` default).

Usage:
    python -m shopdesk.scripts.import_legacy credits.json
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from shopdesk.app.core.database import SessionLocal, init_db
from shopdesk.app.services.legacy_import import import_legacy_credits


def read_export(path: Path) -> list[dict]:
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        return json.loads(text)
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("export", type=Path, help="Path to the JSON export")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    documents = read_export(args.export)

    init_db()
    db = SessionLocal()
    try:
        count = import_legacy_credits(db, documents)
        print(f"Imported {count} credit entries from {args.export}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
