"""Registry for discovering and instantiating backends."""

from typing import Type

from proposal_hub.backends.base import MarketplaceBackend
from proposal_hub.backends.http import HttpBackend
from proposal_hub.backends.local import LocalBackend


class BackendRegistry:
    """Provides backends by name."""

    _backends: dict[str, Type[MarketplaceBackend]] = {
        "local": LocalBackend,
        "http": HttpBackend,
    }

    @classmethod
    def get(cls, name: str, **kwargs) -> MarketplaceBackend:
        """Get a backend instance by name. kwargs passed to the backend __init__."""
        backend_cls = cls._backends.get(name.lower())
        if not backend_cls:
            raise ValueError(f"Unknown backend: {name}. Available: {list(cls._backends.keys())}")
        return backend_cls(**kwargs)

    @classmethod
    def available(cls) -> list[str]:
        return list(cls._backends.keys())
