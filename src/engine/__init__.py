"""Return computation engine.

Form declarations, the line dependency graph, the resolver, and the assembler
that produces a ComputedReturn.

Components:
- forms: FormType, LineSpec, FormSpec, FormInput, FormCatalog
- catalog: the default catalog of every modeled form
- graph: FormGraph, the per-return line dependency graph
- resolver: LineResolver, topological evaluation with provenance
- assembler: compute_return and compute_returns_concurrently

Logging is left unconfigured until the application calls
src.core.logging.configure_logging() once at startup.
"""

from src.engine.assembler import (
    ComputedReturn,
    FormInstance,
    ReturnRequest,
    compute_return,
    compute_returns_concurrently,
)
from src.engine.catalog import DEFAULT_FORMS, default_catalog
from src.engine.forms import (
    Absent,
    FormCatalog,
    FormInput,
    FormSpec,
    FormType,
    LineKey,
    LineKind,
    LineRef,
    LineSpec,
    local,
    ref,
    total,
)
from src.engine.graph import FormGraph
from src.engine.provenance import ProvenanceInput, ProvenanceRecord
from src.engine.resolver import LineInputs, LineResolver

__all__ = [
    # Assembly
    "compute_return",
    "compute_returns_concurrently",
    "ComputedReturn",
    "FormInstance",
    "ReturnRequest",
    # Declarations
    "FormType",
    "FormInput",
    "FormSpec",
    "FormCatalog",
    "LineSpec",
    "LineKind",
    "LineKey",
    "LineRef",
    "Absent",
    "ref",
    "total",
    "local",
    "DEFAULT_FORMS",
    "default_catalog",
    # Graph and resolution
    "FormGraph",
    "LineResolver",
    "LineInputs",
    "ProvenanceRecord",
    "ProvenanceInput",
]
