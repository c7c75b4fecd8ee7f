"""Records describing the bindable items of an expanded tree."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pymodgen.artifacts.contract import ARTIFACT_SCHEMA_VERSION
from pymodgen.pymodule.items import ItemKind


class BindingRecord(BaseModel):
    """One registered item of one module."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    path: str
    module: str
    kind: ItemKind
    declaration: str
    py_name: str
    guards: list[str] = Field(
        default_factory=list, description="Guard expressions in source order"
    )
    line: int | None = Field(
        default=None, description="Line of the declaration in the input file"
    )


class ModuleRecord(BaseModel):
    """One expanded module body."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    path: str
    module: str
    output: str
    binding_count: int


__all__ = ["BindingRecord", "ModuleRecord"]
