"""Serialization helpers for generated artifacts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from pydantic import BaseModel


def _to_dict(obj: BaseModel) -> dict[str, object]:
    """Convert a record to a dict for JSON serialization."""
    return obj.model_dump()


def _write_jsonl(path: Path, records: Sequence[BaseModel]) -> None:
    with path.open("wb") as f:
        for rec in records:
            f.write(orjson.dumps(_to_dict(rec), option=orjson.OPT_SORT_KEYS))
            f.write(b"\n")


def _load_jsonl(path: Path) -> list[dict[str, object]]:
    records: list[dict[str, object]] = []
    with path.open("rb") as handle:
        for line in handle:
            line = line.strip()
            if line:
                record = orjson.loads(line)
                if isinstance(record, dict):
                    records.append(record)
    return records


def _get_output_dir_name(out_dir: Path, root: Path) -> str:
    """Relative POSIX path of out_dir inside root, or "" when outside."""
    try:
        resolved_out = out_dir.resolve()
        resolved_root = root.resolve()
    except OSError:
        return ""
    if resolved_out == resolved_root or not resolved_out.is_relative_to(resolved_root):
        return ""
    return resolved_out.relative_to(resolved_root).as_posix()
