from __future__ import annotations

import argparse
from pathlib import Path

from crm_dedupe.datasets import ReferenceDatasetGenerator
from crm_dedupe.stores import InMemoryRecordStore, save_store


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic CRM snapshot with duplicates")
    parser.add_argument("--contacts", type=int, default=10000)
    parser.add_argument("--companies", type=int, default=2000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--duplicate-rate", type=float, default=0.15)
    parser.add_argument("--output", type=Path, default=Path("data/reference_crm_snapshot.json"))
    args = parser.parse_args()

    collections = ReferenceDatasetGenerator(seed=args.seed).generate(
        contacts=args.contacts,
        companies=args.companies,
        duplicate_rate=args.duplicate_rate,
    )
    save_store(InMemoryRecordStore(collections), args.output)


if __name__ == "__main__":
    main()
