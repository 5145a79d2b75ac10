"""Core types: the PRNG and the run data model."""

from statefuzz.core.models import (
    Action,
    Counterexample,
    ExpectedActionFailure,
    FuzzConfig,
    Invariant,
    InvariantTest,
    PropertyResult,
    RunConfig,
    RunResult,
    SuiteSummary,
    Violation,
)
from statefuzz.core.prng import Mulberry32

__all__ = [
    "Mulberry32",
    "RunConfig",
    "FuzzConfig",
    "Action",
    "Invariant",
    "InvariantTest",
    "ExpectedActionFailure",
    "Violation",
    "RunResult",
    "SuiteSummary",
    "Counterexample",
    "PropertyResult",
]
