#!/usr/bin/env python3
from __future__ import annotations

from dataclasses import replace
import argparse
import json
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from typestore.adaptor import create_firestore_client
from typestore.batch import batch
from typestore.errors import CommitError, TypestoreError
from typestore.operations import parse_operations, stage_operations
from typestore.settings import load_settings


LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply a JSON list of Firestore writes as one atomic batch.")
    parser.add_argument("operations_file", help="JSON file with a list of {op, collection, id, data, merge} objects.")
    parser.add_argument(
        "--project-id",
        default=None,
        help="Firestore project id. If omitted, FIRESTORE_PROJECT_ID from settings is used.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = parse_args(argv)
    settings = load_settings()
    if args.project_id:
        settings = replace(settings, firestore_project_id=args.project_id.strip())

    try:
        raw = json.loads(Path(args.operations_file).read_text(encoding="utf-8"))
        operations = parse_operations(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        print(f"Invalid operations file: {exc}", file=sys.stderr)
        return 2

    client = create_firestore_client(settings)
    writes = batch(client)
    try:
        staged = stage_operations(writes, operations)
    except TypestoreError as exc:
        print(f"Invalid operation: {exc}", file=sys.stderr)
        return 2

    LOGGER.info("applying batch: operations=%s", staged)
    try:
        writes.commit()
    except CommitError as exc:
        LOGGER.exception("batch commit failed: %s", exc)
        return 1

    print(json.dumps({"staged": staged}, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
