#!/usr/bin/env python3
"""
View stored entries from the configured record store.

Usage:
    python view_entries.py                          # List datasets
    python view_entries.py "Branch A"               # List entries of a dataset
    python view_entries.py --stats                  # Show statistics
    python view_entries.py --export out.xlsx        # Export every dataset
    python view_entries.py "Branch A" --export a.xlsx   # Export one dataset
"""

import argparse
import os
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

from src.export import build_export
from src.intake import FIELD_LABELS, FIELD_ORDER, RecordStoreError
from src.storage import RecordStore, create_record_store
from src.utils.config import get_settings

console = Console()


def truncate(text: str, max_len: int = 30) -> str:
    """Truncate text with ellipsis."""
    if len(text) > max_len:
        return text[:max_len - 3] + "..."
    return text


def print_dataset_list(store: RecordStore):
    """Print a table of datasets."""
    names = store.list_dataset_names()
    if not names:
        console.print("\nNo datasets found.")
        return

    table = Table(title="Datasets", box=box.ROUNDED)
    table.add_column("Dataset", style="cyan")
    table.add_column("Entries", justify="right")
    for name in names:
        table.add_row(name, str(store.count_entries(name)))
    console.print(table)
    console.print(f"Total: {len(names)} dataset(s)")


def print_entries(store: RecordStore, dataset: str) -> bool:
    """Print the entries of one dataset. Returns False if it has none."""
    entries = store.list_entries(dataset)
    if not entries:
        console.print(f"\nDataset not found: {dataset}")
        return False

    table = Table(title=dataset, box=box.SIMPLE_HEAVY)
    table.add_column("ID", style="dim")
    for key in FIELD_ORDER:
        table.add_column(FIELD_LABELS[key])
    for entry in entries:
        table.add_row(str(entry.id), *(truncate(value) for value in entry.as_row()))
    console.print(table)
    console.print(f"Total: {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
    return True


def print_stats(store: RecordStore):
    """Print store statistics."""
    names = store.list_dataset_names()
    counts = {name: store.count_entries(name) for name in names}

    console.print(f"\n[bold]STORE STATISTICS[/bold]")
    console.print(f"  Backend:  {store.backend_name}")
    console.print(f"  Datasets: {len(names)}")
    console.print(f"  Entries:  {sum(counts.values())}")
    for name, count in counts.items():
        console.print(f"    {name}: {count}")


def write_export(store: RecordStore, path: Path, dataset: str = None):
    """Write an .xlsx export to disk."""
    export = build_export(store, dataset)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(export.content)
    console.print(f"✓ Exported to: {path}")


def main():
    parser = argparse.ArgumentParser(description="View stored claim entries")
    parser.add_argument("dataset", nargs="?", help="Dataset to view")
    parser.add_argument("--stats", action="store_true", help="Show statistics")
    parser.add_argument("--export", type=Path, metavar="PATH", help="Write an .xlsx export")

    args = parser.parse_args()

    load_dotenv()
    store = create_record_store(get_settings())

    try:
        if args.stats:
            print_stats(store)
        elif args.export:
            write_export(store, args.export, args.dataset)
        elif args.dataset:
            if not print_entries(store, args.dataset):
                sys.exit(1)
        else:
            print_dataset_list(store)
    except RecordStoreError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
