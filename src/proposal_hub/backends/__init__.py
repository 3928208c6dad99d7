"""Backends implementing the proposal/response contract."""

from proposal_hub.backends.base import MarketplaceBackend
from proposal_hub.backends.http import HttpBackend
from proposal_hub.backends.local import LocalBackend
from proposal_hub.backends.registry import BackendRegistry

__all__ = ["BackendRegistry", "HttpBackend", "LocalBackend", "MarketplaceBackend"]
