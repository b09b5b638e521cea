"""
Exceptions for devnetgen.

Error Taxonomy:
    - Configuration-integrity errors (ConfigurationError and subclasses):
      the input network is structurally invalid. Fatal, the whole run aborts
      and no partial output is written.
    - Asset-loading errors (ScriptNotFoundError): raised by the script
      provider, caught by builders and degraded to a logged warning.
    - Output-target errors (OutputTargetError): raised before any manifest
      work when there is nowhere to write.

Missing optional artifacts (no genesis patch, no ICS provider) are not
errors at all; the relevant generator simply returns an empty list.
"""

from __future__ import annotations

from collections.abc import Iterable


class GeneratorError(Exception):
    """Base exception for all devnetgen errors."""

    def __init__(self, message: str, entity: str | None = None):
        super().__init__(message)
        self.entity = entity

    def __str__(self) -> str:
        if self.entity:
            return f"[{self.entity}] {self.args[0]}"
        return str(self.args[0])


class ConfigurationError(GeneratorError):
    """Raised when the network description is structurally invalid."""

    pass


class UnknownChainReferenceError(ConfigurationError):
    """Raised when a relayer references a chain id absent from the network."""

    def __init__(self, chain_id: str, entity: str | None = None):
        super().__init__(f"Chain {chain_id} not found in configuration", entity)
        self.chain_id = chain_id


class UnsupportedRelayerTypeError(ConfigurationError):
    """Raised when no builder is registered for a relayer type."""

    def __init__(
        self,
        relayer_type: str,
        available: Iterable[str] = (),
        entity: str | None = None,
    ):
        available = sorted(available)
        message = f"Unsupported relayer type: {relayer_type}"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message, entity)
        self.relayer_type = relayer_type
        self.available = available


class ScriptNotFoundError(GeneratorError):
    """Raised when a script reference cannot be turned into content."""

    pass


class OutputTargetError(GeneratorError):
    """Raised when a write is requested without a usable output directory."""

    pass
