"""multibridge - unattended sequential cross-chain bridging for wallet batches.

The orchestration engine walks every wallet through a number of cycles over
the configured destination chains, bridging native ETH through a routing
provider (LI.FI by default) with randomized pacing between legs.
"""

from .base import (
    AcceptancePolicy,
    ChainClient,
    ChainClientFactory,
    RoutingProvider,
    WalletHandle,
)
from .chains import DEFAULT_CHAINS, DEFAULT_REGISTRY, NATIVE_TOKEN, ChainDescriptor, ChainRegistry
from .config import (
    ClientConfig,
    PacingConfig,
    RoutingConfig,
    RunConfiguration,
    build_run_config,
)
from .credentials import load_private_keys
from .engine import BridgeOrchestrator, EngineState
from .exceptions import (
    BridgeError,
    ConfigurationError,
    CredentialError,
    InvalidParameter,
    InvalidSelection,
    LegFailed,
    NetworkError,
    NoRouteFound,
    NoValidDestinations,
    RateUpdateRejected,
    RouteExecutionError,
    UnknownChain,
)
from .executor import BridgeLegExecutor
from .policies import AlwaysAccept, MaxRateDropPolicy
from .types import LegOutcome, Route, RouteStep, RunSummary, StepEvent, TransferIntent
from .utils import from_wei, random_delay_seconds, to_wei

__version__ = "0.1.0"

__all__ = [
    # Engine
    "BridgeOrchestrator",
    "BridgeLegExecutor",
    "EngineState",
    # Collaborator interfaces
    "AcceptancePolicy",
    "ChainClient",
    "ChainClientFactory",
    "RoutingProvider",
    "WalletHandle",
    "AlwaysAccept",
    "MaxRateDropPolicy",
    # Chains and configuration
    "ChainDescriptor",
    "ChainRegistry",
    "DEFAULT_CHAINS",
    "DEFAULT_REGISTRY",
    "NATIVE_TOKEN",
    "ClientConfig",
    "PacingConfig",
    "RoutingConfig",
    "RunConfiguration",
    "build_run_config",
    "load_private_keys",
    # Types
    "LegOutcome",
    "Route",
    "RouteStep",
    "RunSummary",
    "StepEvent",
    "TransferIntent",
    # Exceptions
    "BridgeError",
    "ConfigurationError",
    "CredentialError",
    "InvalidParameter",
    "InvalidSelection",
    "LegFailed",
    "NetworkError",
    "NoRouteFound",
    "NoValidDestinations",
    "RateUpdateRejected",
    "RouteExecutionError",
    "UnknownChain",
    # Utility functions
    "to_wei",
    "from_wei",
    "random_delay_seconds",
]
