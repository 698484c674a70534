"""Deployment config files (YAML) and environment settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from xnode_deployer.providers.base import DEFAULT_TIMEOUT

# Environment variable holding the API key for each provider.
API_KEY_ENV: dict[str, str] = {
    "hivelocity": "HIVELOCITY_API_KEY",
    "hyperstack": "HYPERSTACK_API_KEY",
}

_API_KEY_HINTS: dict[str, str] = {
    "hivelocity": "https://my.hivelocity.net/account/api",
    "hyperstack": "https://console.hyperstack.cloud/api-keys",
}

_TOP_LEVEL_KEYS = frozenset({"provider", "hardware", "timeout", "wait_for_ip"})


@dataclass
class DeploymentConfig:
    """Which provider and hardware a deployment targets."""

    provider: str
    hardware: Any
    timeout: float = DEFAULT_TIMEOUT
    options: dict[str, Any] = field(default_factory=dict)

    def deployer_kwargs(self) -> dict[str, Any]:
        return {"timeout": self.timeout, **self.options}


def hardware_from_dict(provider: str, data: dict) -> Any:
    """Build a hardware spec for ``provider`` from its ``to_dict`` form."""
    if provider == "hivelocity":
        from xnode_deployer.providers.hivelocity import hivelocity_hardware_from_dict

        return hivelocity_hardware_from_dict(data)
    if provider == "hyperstack":
        from xnode_deployer.providers.hyperstack import hyperstack_hardware_from_dict

        return hyperstack_hardware_from_dict(data)
    raise ValueError(
        f"Unknown provider: {provider!r}. Known providers: {sorted(API_KEY_ENV)}"
    )


def parse_config(raw: Any) -> DeploymentConfig:
    """Validate a parsed config mapping.

    Unknown keys cause a ``ValueError`` so typos are caught early.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Deployment config must be a mapping, got {type(raw).__name__}")

    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(
            f"Unknown top-level keys in deployment config: {sorted(unknown)}. "
            f"Allowed: {sorted(_TOP_LEVEL_KEYS)}"
        )
    for key in ("provider", "hardware"):
        if key not in raw:
            raise ValueError(f"Deployment config is missing {key!r}")

    provider = raw["provider"]
    hardware = hardware_from_dict(provider, raw["hardware"])

    options: dict[str, Any] = {}
    if "wait_for_ip" in raw:
        if provider != "hyperstack":
            raise ValueError("'wait_for_ip' is only supported by the hyperstack provider")
        if not isinstance(raw["wait_for_ip"], bool):
            raise ValueError(f"'wait_for_ip' must be true or false, got {raw['wait_for_ip']!r}")
        options["wait_for_ip"] = raw["wait_for_ip"]

    timeout = raw.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValueError(f"'timeout' must be a number of seconds, got {timeout!r}")
    timeout = float(timeout)
    if timeout <= 0:
        raise ValueError(f"'timeout' must be positive, got {timeout}")

    return DeploymentConfig(provider=provider, hardware=hardware, timeout=timeout, options=options)


def load_config(path: str | Path) -> DeploymentConfig:
    """Load a deployment config from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f)
    return parse_config(raw)


def api_key_for(provider: str) -> str:
    """Read the provider API key from the environment."""
    env_var = API_KEY_ENV.get(provider)
    if env_var is None:
        raise ValueError(f"Unknown provider: {provider!r}")
    api_key = os.environ.get(env_var)
    if not api_key:
        raise RuntimeError(
            f"{env_var} environment variable is not set. "
            f"Get your API key from {_API_KEY_HINTS[provider]}"
        )
    return api_key


def state_dir() -> Path:
    """Return the state directory, respecting XNODE_DEPLOYER_STATE_DIR."""
    env = os.environ.get("XNODE_DEPLOYER_STATE_DIR")
    if env:
        return Path(env)
    return Path.home() / ".xnode-deployer"
