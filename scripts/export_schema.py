#!/usr/bin/env python3
"""
Export the entry schema.

Writes the JSON Schema of a submitted entry and the Postgres DDL for the
hosted `entries` table (paste into the Supabase SQL editor).
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.intake import FIELD_ORDER, EntryFields
from src.storage import ENTRY_COLUMNS


def entries_table_ddl(table: str = "entries") -> str:
    """Postgres DDL for the flat row-per-entry table."""
    columns = [
        "    id bigint generated by default as identity primary key",
        "    dataset_name text not null",
    ]
    columns += [
        f"    {ENTRY_COLUMNS.to_storage(key)} text not null default ''"
        for key in FIELD_ORDER
    ]
    columns += [
        "    created_at timestamptz not null default now()",
        "    updated_at timestamptz not null default now()",
    ]
    body = ",\n".join(columns)
    return (
        f"create table if not exists {table} (\n{body}\n);\n\n"
        f"create index if not exists idx_{table}_dataset\n"
        f"    on {table} (dataset_name, created_at);\n"
    )


def export_json_schema(output_path: Path) -> dict:
    """Export the JSON Schema for a submitted entry."""
    schema = EntryFields.model_json_schema(by_alias=True)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)

    print(f"✓ JSON Schema exported to: {output_path}")
    print(f"  Properties: {len(schema['properties'])} fields")
    return schema


def export_ddl(output_path: Path, table: str) -> str:
    """Export the SQL for the entries table."""
    ddl = entries_table_ddl(table)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(ddl, encoding="utf-8")
    print(f"✓ Table DDL exported to: {output_path}")
    return ddl


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Export entry schema and table DDL")
    parser.add_argument("--out-dir", type=Path, default=Path("data"), help="Output directory")
    parser.add_argument("--table", default="entries", help="Table name")
    args = parser.parse_args()

    print("=" * 60)
    print("Claim Entry - Schema Export")
    print("=" * 60)

    export_json_schema(args.out_dir / "entry_schema.json")
    export_ddl(args.out_dir / f"{args.table}.sql", args.table)


if __name__ == "__main__":
    main()
