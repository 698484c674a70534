"""Provider registry: look up deployer classes by name."""

from __future__ import annotations

import importlib
from typing import Any

from xnode_deployer.providers.base import XnodeDeployer

_PROVIDERS: dict[str, type[XnodeDeployer]] = {}

# Maps provider name -> (module_path, class_name) for lazy loading.
PROVIDER_MODULES: dict[str, tuple[str, str]] = {
    "hivelocity": ("xnode_deployer.providers.hivelocity", "HivelocityDeployer"),
    "hyperstack": ("xnode_deployer.providers.hyperstack", "HyperstackDeployer"),
}


def register(name: str, cls: type[XnodeDeployer]) -> None:
    """Register a deployer class under a name."""
    _PROVIDERS[name] = cls


def get_deployer_class(name: str) -> type[XnodeDeployer]:
    cls = _PROVIDERS.get(name)
    if not cls:
        available = list(_PROVIDERS.keys())
        raise ValueError(
            f"Unknown provider: {name!r}. Available: {available}"
        )
    return cls


def create_deployer(name: str, api_key: str, hardware: Any, **kwargs: Any) -> XnodeDeployer:
    """Instantiate a registered deployer for ``hardware``."""
    return get_deployer_class(name)(api_key, hardware, **kwargs)


def list_providers() -> list[str]:
    """Return names of all registered providers."""
    return list(_PROVIDERS.keys())


def ensure_provider_registered(name: str) -> None:
    """Import the provider module and register the class if not already present."""
    if name in _PROVIDERS:
        return
    entry = PROVIDER_MODULES.get(name)
    if not entry:
        raise ValueError(
            f"No known module for provider {name!r}. "
            f"Known providers: {list(PROVIDER_MODULES.keys())}"
        )
    module_path, class_name = entry
    mod = importlib.import_module(module_path)
    cls = getattr(mod, class_name)
    register(name, cls)
