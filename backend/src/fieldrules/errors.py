"""Exceptions raised by fieldrules."""


class FieldRulesError(Exception):
    """Base class for all fieldrules errors."""


class RuleConfigurationError(FieldRulesError):
    """A rule's configuration cannot be used for evaluation.

    Raised lazily during evaluation (e.g. an uncompilable pattern), never
    from the attachment call. The re-evaluation loop converts it into an
    invalid outcome.
    """


class LookupFailedError(FieldRulesError):
    """A remote uniqueness lookup could not produce an answer."""


class LookupTransportError(LookupFailedError):
    """The lookup request failed at the transport level (network, HTTP status)."""


class MalformedLookupResponse(LookupFailedError):
    """The lookup endpoint answered with something other than a JSON array."""


class DefinitionError(FieldRulesError):
    """A declarative rule definition is invalid."""
