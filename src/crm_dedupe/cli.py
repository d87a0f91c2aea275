from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from crm_dedupe.config import get_settings
from crm_dedupe.datasets import ReferenceDatasetGenerator
from crm_dedupe.engine import DedupeEngine
from crm_dedupe.errors import DedupeError
from crm_dedupe.log import setup_logging
from crm_dedupe.models import DuplicateGroup, DuplicateMatch
from crm_dedupe.schema import EntityKind
from crm_dedupe.stores import InMemoryRecordStore, load_store, save_store

_OVERRIDE_ARGS = ("email", "phone", "first_name", "last_name", "name", "domain", "website")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(args.log_level)
    try:
        if args.command == "generate":
            run_generate(
                output=args.output,
                contacts=args.contacts,
                companies=args.companies,
                duplicate_rate=args.duplicate_rate,
                seed=args.seed,
            )
        elif args.command == "find":
            run_find(args)
        elif args.command == "find-all":
            run_find_all(store_path=args.store, kind=args.kind, limit=args.limit, min_confidence=args.min_confidence)
        elif args.command == "merge":
            run_merge(
                store_path=args.store,
                kind=args.kind,
                primary_id=args.primary,
                duplicate_ids=args.duplicate,
                merged_data=_load_merge_data(args.data),
            )
    except (DedupeError, OSError, ValueError) as exc:
        logger.error(f"{args.command} failed: {exc}")
        return 1
    return 0


def run_generate(*, output: Path, contacts: int, companies: int, duplicate_rate: float, seed: int) -> None:
    collections = ReferenceDatasetGenerator(seed=seed).generate(
        contacts=contacts,
        companies=companies,
        duplicate_rate=duplicate_rate,
    )
    save_store(InMemoryRecordStore(collections), output)
    print(f"Store: {output}")
    for name, documents in collections.items():
        print(f"{name}={len(documents)}")


def run_find(args: argparse.Namespace) -> None:
    overrides = {
        field: getattr(args, field)
        for field in _OVERRIDE_ARGS
        if getattr(args, field) is not None
    }
    engine = DedupeEngine(load_store(args.store))
    matches = engine.find_duplicates(
        args.kind,
        source_id=args.id,
        limit=args.limit,
        min_confidence=args.min_confidence,
        **overrides,
    )
    print(json.dumps([_match_payload(match) for match in matches], indent=2, default=_json_default))


def run_find_all(*, store_path: Path, kind: str, limit: int | None, min_confidence: float | None) -> None:
    engine = DedupeEngine(load_store(store_path))
    groups = engine.find_all_duplicates(kind, limit=limit, min_confidence=min_confidence)
    print(json.dumps([_group_payload(group) for group in groups], indent=2, default=_json_default))


def run_merge(
    *,
    store_path: Path,
    kind: str,
    primary_id: str,
    duplicate_ids: list[str],
    merged_data: dict[str, Any],
) -> None:
    store = load_store(store_path)
    primary = DedupeEngine(store).merge(kind, primary_id, duplicate_ids, merged_data)
    save_store(store, store_path)
    print(json.dumps({"primary_id": primary, "merged_from_ids": duplicate_ids}, indent=2))


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="crm-dedupe", description="CRM duplicate detection and merge CLI")
    parser.add_argument("--log-level", type=str, default=settings.log_level)
    subparsers = parser.add_subparsers(dest="command")
    kinds = [kind.value for kind in EntityKind]

    generate_parser = subparsers.add_parser(
        "generate",
        help="Write a synthetic CRM snapshot with intentional duplicates",
    )
    generate_parser.add_argument("--output", type=Path, default=Path("data/crm_snapshot.json"))
    generate_parser.add_argument("--contacts", type=int, default=500)
    generate_parser.add_argument("--companies", type=int, default=100)
    generate_parser.add_argument("--duplicate-rate", type=float, default=0.15)
    generate_parser.add_argument("--seed", type=int, default=42)

    find_parser = subparsers.add_parser("find", help="Rank likely duplicates of one record or raw field values")
    find_parser.add_argument("kind", choices=kinds)
    find_parser.add_argument("--store", type=Path, required=True)
    find_parser.add_argument("--id", type=str, default=None)
    for field in _OVERRIDE_ARGS:
        find_parser.add_argument(f"--{field.replace('_', '-')}", dest=field, type=str, default=None)
    find_parser.add_argument("--limit", type=int, default=None)
    find_parser.add_argument("--min-confidence", type=float, default=None)

    find_all_parser = subparsers.add_parser("find-all", help="Group the whole collection into duplicate groups")
    find_all_parser.add_argument("kind", choices=kinds)
    find_all_parser.add_argument("--store", type=Path, required=True)
    find_all_parser.add_argument("--limit", type=int, default=None)
    find_all_parser.add_argument("--min-confidence", type=float, default=None)

    merge_parser = subparsers.add_parser("merge", help="Merge duplicates into a primary record and save the snapshot")
    merge_parser.add_argument("kind", choices=kinds)
    merge_parser.add_argument("--store", type=Path, required=True)
    merge_parser.add_argument("--primary", type=str, required=True)
    merge_parser.add_argument("--duplicate", type=str, action="append", required=True)
    merge_parser.add_argument("--data", type=str, required=True, help="JSON object, or @path to a JSON file")

    return parser


def _load_merge_data(raw: str) -> dict[str, Any]:
    if raw.startswith("@"):
        raw = Path(raw[1:]).read_text(encoding="utf-8")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("--data must be a JSON object")
    return payload


def _match_payload(match: DuplicateMatch) -> dict[str, Any]:
    payload = asdict(match)
    payload["confidence"] = round(match.confidence, 4)
    return payload


def _group_payload(group: DuplicateGroup) -> dict[str, Any]:
    return {
        "primary": asdict(group.primary),
        "metadata": asdict(group)["metadata"],
        "duplicates": [_match_payload(match) for match in group.duplicates],
    }


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


if __name__ == "__main__":
    raise SystemExit(main())
