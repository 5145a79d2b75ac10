"""Custom exception hierarchy for statefuzz.

statefuzz errors carry:
- Structured error codes for programmatic handling
- Reproduction context (test, iteration, seed, invariant)
- Actionable suggestions for recovery

All statefuzz errors inherit from StateFuzzError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with the run coordinates at the time of failure
- suggestions: List of actionable steps to resolve the issue

Only action failures are recovered inside the engine. Every error defined
here propagates to the caller of ``run``/``run_suite``/``run_property``.

Example:
    try:
        runner.run(test)
    except InvariantViolation as e:
        print(f"Error: {e}")
        print(f"Re-run with seed={e.violation.seed}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from statefuzz.core.models import (
        Counterexample,
        RunResult,
        SuiteSummary,
        Violation,
    )


class ErrorCode(Enum):
    """Standardized error codes for statefuzz.

    Error codes are organized by category:
    - E1xx: Configuration errors
    - E2xx: Generation errors
    - E3xx: Execution errors (setup, invariants, properties)
    - E9xx: Unknown/internal errors
    """

    # Configuration errors (E1xx)
    INVALID_CONFIG = "E101"
    INVALID_TEST = "E102"

    # Generation errors (E2xx)
    GENERATOR_EXHAUSTED = "E201"

    # Execution errors (E3xx)
    SETUP_FAILED = "E301"
    INVARIANT_VIOLATED = "E302"
    PROPERTY_FAILED = "E303"
    SUITE_FAILED = "E304"
    CHECK_FAILED = "E305"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "configuration"
        elif code_num < 300:
            return "generation"
        elif code_num < 400:
            return "execution"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Where in a run an error happened.

    Attributes:
        test_name: Name of the invariant test or property being executed
        iteration: 0-based iteration index within the run
        seed: Seed of the run; re-running with it reproduces the failure
        invariant_name: Name of the failing invariant
        invariant_index: Position of the failing invariant in its list
        run_index: 0-based draw index for property runs
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    test_name: str | None = None
    iteration: int | None = None
    seed: int | None = None
    invariant_name: str | None = None
    invariant_index: int | None = None
    run_index: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "test_name": self.test_name,
            "iteration": self.iteration,
            "seed": self.seed,
            "invariant_name": self.invariant_name,
            "invariant_index": self.invariant_index,
            "run_index": self.run_index,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.test_name:
            parts.append(f"test={self.test_name}")
        if self.iteration is not None:
            parts.append(f"iteration={self.iteration}")
        if self.run_index is not None:
            parts.append(f"run={self.run_index}")
        if self.invariant_name:
            parts.append(f"invariant={self.invariant_name}")
        if self.seed is not None:
            parts.append(f"seed={self.seed}")
        return " > ".join(parts) if parts else "unknown location"


class StateFuzzError(Exception):
    """Base exception for all statefuzz errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with run coordinates
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)

    Example:
        try:
            runner.run(test)
        except StateFuzzError as e:
            print(f"Error [{e.error_code.value}]: {e.message}")
            for suggestion in e.suggestions:
                print(f"  - {suggestion}")
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Cause: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(StateFuzzError):
    """Invalid run configuration or test definition.

    Raised before any iteration begins, e.g. for a non-positive iteration
    count or an invariant test without actions.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check iterations/num_runs are positive integers",
        "Check STATEFUZZ_* and INVARIANT_*/FUZZ_* environment variables",
        "Validate the YAML config file passed with --config",
    ]

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message=message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            base = f"{base} (field: {self.field})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        result["value"] = repr(self.value)
        return result


class GeneratorExhaustion(StateFuzzError):
    """A filtered generator could not satisfy its predicate.

    This is a test-authoring error, distinct from an invariant violation:
    the predicate rejected every one of ``attempts`` consecutive draws.
    """

    error_code = ErrorCode.GENERATOR_EXHAUSTED
    default_message = "Generator filter exhausted its retry budget"
    default_suggestions = [
        "Loosen the filter predicate or generate valid values directly with map()",
        "Raise max_attempts if the predicate is merely rare",
    ]

    def __init__(
        self,
        message: str | None = None,
        generator_name: str | None = None,
        attempts: int = 0,
        **kwargs: Any,
    ) -> None:
        self.generator_name = generator_name
        self.attempts = attempts
        if message is None and generator_name:
            message = (
                f"Filter on '{generator_name}' rejected {attempts} consecutive draws"
            )
        super().__init__(message=message, **kwargs)


class SetupFailure(StateFuzzError):
    """The test fixture's setup() raised.

    Setup failures indicate a broken harness, not a property violation, and
    abort the whole run.
    """

    error_code = ErrorCode.SETUP_FAILED
    default_message = "Test setup failed"
    default_suggestions = [
        "Make sure setup() is idempotent and can be called once per iteration",
        "Run setup() on its own to see the underlying error",
    ]


class InvariantViolation(StateFuzzError):
    """An invariant failed after an action sequence.

    Carries the Violation record and the partial RunResult up to and including
    the failing iteration.
    """

    error_code = ErrorCode.INVARIANT_VIOLATED
    default_message = "Invariant violated"

    def __init__(
        self,
        violation: Violation,
        result: RunResult | None = None,
        **kwargs: Any,
    ) -> None:
        self.violation = violation
        self.result = result
        kwargs.setdefault(
            "context",
            ErrorContext(
                test_name=violation.test_name,
                iteration=violation.iteration,
                seed=violation.seed,
                invariant_name=violation.invariant_name,
                invariant_index=violation.invariant_index,
            ),
        )
        kwargs.setdefault("cause", violation.error)
        super().__init__(
            message=f"Invariant '{violation.invariant_name}' violated: {violation.message}",
            **kwargs,
        )

    @property
    def suggestions(self) -> list[str]:
        return [f"Reproduce with seed={self.violation.seed}"]


class PropertyFailure(StateFuzzError):
    """A property predicate was falsified by a generated input."""

    error_code = ErrorCode.PROPERTY_FAILED
    default_message = "Property falsified"

    def __init__(
        self,
        counterexample: Counterexample,
        counterexamples: list[Counterexample] | None = None,
        **kwargs: Any,
    ) -> None:
        self.counterexample = counterexample
        self.counterexamples = counterexamples or [counterexample]
        kwargs.setdefault(
            "context",
            ErrorContext(
                test_name=counterexample.property_name,
                seed=counterexample.seed,
                run_index=counterexample.run_index,
            ),
        )
        kwargs.setdefault("cause", counterexample.error)
        super().__init__(
            message=(
                f"Property '{counterexample.property_name}' falsified by "
                f"{counterexample.input!r}"
            ),
            **kwargs,
        )

    @property
    def suggestions(self) -> list[str]:
        return [f"Reproduce with seed={self.counterexample.seed}"]


class SuiteFailure(StateFuzzError):
    """One or more tests of a suite violated an invariant."""

    error_code = ErrorCode.SUITE_FAILED
    default_message = "Invariant suite failed"

    def __init__(self, summary: SuiteSummary, **kwargs: Any) -> None:
        self.summary = summary
        self.violations = list(summary.violations)
        names = ", ".join(v.test_name for v in self.violations)
        super().__init__(
            message=f"{len(self.violations)} test(s) violated invariants: {names}",
            **kwargs,
        )

    @property
    def suggestions(self) -> list[str]:
        return [
            f"Reproduce '{v.test_name}' with seed={v.seed}" for v in self.violations
        ]


class InvariantCheckError(StateFuzzError, AssertionError):
    """Raised by the invariant helper checks when a property does not hold."""

    error_code = ErrorCode.CHECK_FAILED
    default_message = "Invariant check failed"
