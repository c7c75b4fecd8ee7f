"""Module item registry and registration code emission."""

from pymodgen.pymodule.driver import ExpandedModule, extract_module_items, impl_pymodule
from pymodgen.pymodule.items import Class, EvaluatedAttr, Function, Guard, ModuleItem
from pymodgen.pymodule.registry import Module

__all__ = [
    "Class",
    "EvaluatedAttr",
    "ExpandedModule",
    "Function",
    "Guard",
    "Module",
    "ModuleItem",
    "extract_module_items",
    "impl_pymodule",
]
