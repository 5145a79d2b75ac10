"""statefuzz error handling.

Structured exceptions with error codes and reproduction context.
"""

from statefuzz.errors.base import (
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    GeneratorExhaustion,
    InvariantCheckError,
    InvariantViolation,
    PropertyFailure,
    SetupFailure,
    StateFuzzError,
    SuiteFailure,
)

__all__ = [
    "StateFuzzError",
    "ErrorCode",
    "ErrorContext",
    "ConfigurationError",
    "GeneratorExhaustion",
    "SetupFailure",
    "InvariantViolation",
    "PropertyFailure",
    "SuiteFailure",
    "InvariantCheckError",
]
