"""Expansion settings shared by the pipeline and the CLI."""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ExpandOptions:
    directive: str = "py_state_machine"     # attribute name that triggers expansion
    class_attribute: str = "pyo3::pyclass"  # put on wrapper structs; "" omits it
    methods_attribute: str = "pyo3::pymethods"  # put on inherent wrapper impls; "" omits it
    deref: bool = True                      # emit Deref/DerefMut to the inner value
    allow_unresolved: bool = False          # keep the sentinel but skip CE3004
    verbose: bool = False

    def attribute(self, path: str) -> str:
        return f"#[{path}]" if path else ""
