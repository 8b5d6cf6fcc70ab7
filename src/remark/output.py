"""JSONL serialization of annotation records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from remark.models import AnnotationRecord


def record_rows(path: str, records: Sequence[AnnotationRecord]) -> list[dict[str, Any]]:
    """Flatten records into JSON-ready rows tagged with their source path."""
    rows: list[dict[str, Any]] = []
    for record in records:
        row = record.model_dump(mode="json")
        row["path"] = path
        declaration = record.declaration
        row["qualified_name"] = declaration.dotted if declaration else None
        rows.append(row)
    return rows


def dumps_jsonl(rows: Sequence[dict[str, Any]]) -> bytes:
    return b"".join(
        orjson.dumps(row, option=orjson.OPT_SORT_KEYS) + b"\n" for row in rows
    )


def write_jsonl(path: Path, rows: Sequence[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_jsonl(rows))


__all__ = ["dumps_jsonl", "record_rows", "write_jsonl"]
