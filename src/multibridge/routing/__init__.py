"""Routing providers."""

from .lifi import LiFiRoutingProvider

__all__ = ["LiFiRoutingProvider"]
