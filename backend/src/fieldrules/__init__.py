"""fieldrules: declarative field validation.

Rules are attached to input-like fields and re-evaluated whenever one of
their triggering events fires. Each evaluation publishes outcome signals on
the field (``valid``/``invalid`` plus a kind-qualified variant) and toggles
a state marker on the nearest enclosing scope.

Usage:
    from fieldrules import (
        validates_presence,
        validates_format,
        validates_uniqueness,
    )

    validates_format(validates_presence(email), format="email")
    validates_uniqueness(email, source="https://example.com/lookup/emails")
"""

from fieldrules.binding import FieldBinding
from fieldrules.config import RuleConfig, merge_options
from fieldrules.definitions import FormDefinition, RuleDefinition, load_form
from fieldrules.errors import (
    DefinitionError,
    FieldRulesError,
    LookupFailedError,
    LookupTransportError,
    MalformedLookupResponse,
    RuleConfigurationError,
)
from fieldrules.host import Field, MemoryField, MemoryScope, Scope
from fieldrules.lookup import (
    HttpLookupTransport,
    InFlightLookup,
    LookupTransport,
    UniquenessCoordinator,
)
from fieldrules.registry import (
    FormatRegistry,
    PredicateRegistry,
    predicate,
)
from fieldrules.rules import (
    bind,
    bindings_for,
    detach_all,
    validates,
    validates_format,
    validates_length,
    validates_numericality,
    validates_presence,
    validates_uniqueness,
)
from fieldrules.settings import EngineSettings
from fieldrules.types import BindingState, Outcome, RemoteSource, RuleKind, Verdict

__all__ = [
    # Types
    "BindingState",
    "Outcome",
    "RemoteSource",
    "RuleKind",
    "Verdict",
    # Configuration
    "EngineSettings",
    "RuleConfig",
    "merge_options",
    # Host
    "Field",
    "MemoryField",
    "MemoryScope",
    "Scope",
    # Engine
    "FieldBinding",
    "HttpLookupTransport",
    "InFlightLookup",
    "LookupTransport",
    "UniquenessCoordinator",
    # Attachment
    "bind",
    "bindings_for",
    "detach_all",
    "validates",
    "validates_format",
    "validates_length",
    "validates_numericality",
    "validates_presence",
    "validates_uniqueness",
    # Registries
    "FormatRegistry",
    "PredicateRegistry",
    "predicate",
    # Definitions
    "FormDefinition",
    "RuleDefinition",
    "load_form",
    # Errors
    "DefinitionError",
    "FieldRulesError",
    "LookupFailedError",
    "LookupTransportError",
    "MalformedLookupResponse",
    "RuleConfigurationError",
]
