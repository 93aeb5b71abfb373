"""Exception hierarchy for the multibridge orchestration engine."""

from typing import Any


class BridgeError(Exception):
    """Base exception for all bridge orchestration errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ----------------------------------------------------------------------
# Configuration errors: fatal, raised before any leg executes
# ----------------------------------------------------------------------
class ConfigurationError(BridgeError):
    """Raised when run configuration cannot be validated."""

    pass


class InvalidParameter(ConfigurationError):
    """Raised when a numeric run parameter fails validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidSelection(ConfigurationError):
    """Raised when the source chain selection does not resolve."""

    def __init__(self, message: str, selection: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.selection = selection


class NoValidDestinations(ConfigurationError):
    """Raised when no destination chain survives selection filtering."""

    pass


class UnknownChain(ConfigurationError):
    """Raised when a chain key or id is not present in the registry."""

    def __init__(self, chain: int | str, details: dict | None = None):
        super().__init__(f"Unknown chain: {chain}", details)
        self.chain = chain


class CredentialError(ConfigurationError):
    """Raised when the credential source is missing or empty."""

    def __init__(self, message: str, source: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.source = source


# ----------------------------------------------------------------------
# Leg-scoped errors: recovered by the leg executor
# ----------------------------------------------------------------------
class NetworkError(BridgeError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class NoRouteFound(BridgeError):
    """Raised when the routing provider cannot price a transfer."""

    def __init__(
        self,
        message: str,
        from_chain: int | None = None,
        to_chain: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.from_chain = from_chain
        self.to_chain = to_chain


class RouteExecutionError(BridgeError):
    """Raised when a route step fails during execution."""

    def __init__(
        self,
        message: str,
        step_index: int | None = None,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.step_index = step_index
        self.tx_hash = tx_hash


class RateUpdateRejected(RouteExecutionError):
    """Raised when the acceptance policy declines an exchange rate update."""

    pass


class LegFailed(BridgeError):
    """Raised by callers that want a failed leg outcome as an exception."""

    def __init__(self, destination: str, reason: str, details: dict | None = None):
        super().__init__(f"Bridge to {destination} failed: {reason}", details)
        self.destination = destination
        self.reason = reason
