"""statefuzz - Property-based invariant testing for stateful systems.

statefuzz drives a system under test (SUT) through seeded random sequences
of actions and checks user-supplied invariants after every sequence. Actions
are allowed to fail (a rejected withdrawal is a normal outcome); invariants
are not. Every run is reproducible from a single integer seed.

Key Features:
    - Deterministic Mulberry32 stream: same seed, same run
    - Composable generators with map/filter/chain
    - Invariant runner with expected-failure tolerance
    - Property executor for pure predicates
    - Async closures via run_async()/run_suite_async()

Example:
    >>> from statefuzz import InvariantRunner, InvariantTest, RunConfig
    >>>
    >>> vault = Vault()
    >>> test = InvariantTest(
    ...     name="vault solvency",
    ...     setup=vault.reset,
    ...     actions=[vault.deposit_random, vault.withdraw_random],
    ...     invariants=[lambda: vault.total_assets >= vault.total_liabilities],
    ... )
    >>> InvariantRunner(RunConfig(iterations=200, seed=42)).run(test)

Core Models:
    InvariantTest: setup, candidate actions and invariants for one SUT
    RunConfig / FuzzConfig: resolved run parameters
    RunResult / SuiteSummary: run outcomes
    Violation / Counterexample: reproducible failure records
"""

from statefuzz.config import FuzzLevel, StateFuzzSettings, load_settings
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
from statefuzz.errors import (
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
from statefuzz.generators import Arbitrary
from statefuzz.runner import (
    InvariantRunner,
    PropertyExecutor,
    create_invariant_runner,
    current_rng,
    draw,
    for_all,
    run_property,
)

__version__ = "0.1.0"

__all__ = [
    # PRNG
    "Mulberry32",
    # Generators
    "Arbitrary",
    # Models
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
    # Runners
    "InvariantRunner",
    "create_invariant_runner",
    "PropertyExecutor",
    "run_property",
    "for_all",
    "draw",
    "current_rng",
    # Configuration
    "StateFuzzSettings",
    "FuzzLevel",
    "load_settings",
    # Errors
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
    "__version__",
]
