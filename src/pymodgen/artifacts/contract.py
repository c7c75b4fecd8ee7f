"""Artifact filenames and schema version of a generated tree."""

from __future__ import annotations

# Bump when a record model changes shape.
ARTIFACT_SCHEMA_VERSION = 1

BINDINGS_JSONL = "bindings.jsonl"
MODULES_JSONL = "modules.jsonl"

MANIFEST_FILES = (BINDINGS_JSONL, MODULES_JSONL)
