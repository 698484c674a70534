"""Abstract base class for xnode deployers (one per hosting provider)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from ipaddress import IPv4Address
from typing import Any, Optional

import requests

from xnode_deployer.errors import TransportError
from xnode_deployer.models import (
    NOT_SUPPORTED,
    DeployInput,
    DeployOutput,
    OptionalSupport,
    Supported,
)
from xnode_deployer.readiness import ReadinessPoller

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class XnodeDeployer(ABC):
    """Base class for deployers.

    Each deployer implements: deploy -> ipv4 -> undeploy, against one
    provider and one hardware variant fixed at construction. Handles
    returned by ``deploy`` are plain dataclasses that survive a
    ``to_dict`` / ``handle_from_dict`` round trip, so undeploy may run in
    a different process.
    """

    hardware_types: tuple[type, ...] = ()

    def __init__(
        self,
        api_key: str,
        hardware: Any,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if self.hardware_types and not isinstance(hardware, self.hardware_types):
            raise TypeError(
                f"{type(self).__name__} does not support hardware {type(hardware).__name__}"
            )
        self.api_key = api_key
        self.hardware = hardware
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    @abstractmethod
    def name(self) -> str:
        """Provider identifier: 'hivelocity', 'hyperstack'."""
        ...

    @abstractmethod
    def deploy(self, input: DeployInput) -> Any:
        """Create the instance and return its handle.

        Not idempotent: retrying after an ambiguous failure may create a
        second billable instance.
        """
        ...

    @abstractmethod
    def undeploy(self, handle: Any) -> None:
        """Delete the instance behind ``handle``. Returns normally on success."""
        ...

    @abstractmethod
    def handle_from_dict(self, data: dict) -> Any:
        """Rebuild a handle persisted with its ``to_dict``."""
        ...

    def ipv4(self, handle: Any) -> OptionalSupport[Optional[IPv4Address]]:
        """Look up the public IPv4 address. Override for providers that expose it."""
        return NOT_SUPPORTED

    def deploy_and_wait(
        self, input: DeployInput, poller: Optional[ReadinessPoller] = None
    ) -> DeployOutput:
        """Deploy, then poll ``ipv4`` until a usable address is reported."""
        handle = self.deploy(input)
        return DeployOutput(ip=self.wait_for_ipv4(handle, poller), provider=handle)

    def wait_for_ipv4(self, handle: Any, poller: Optional[ReadinessPoller] = None) -> Optional[str]:
        """Poll ``ipv4`` until the address is assigned.

        Returns None straight away when the provider cannot report addresses.
        Raises ``ReadinessTimeout`` when the poller runs out of attempts.
        """
        current = self.ipv4(handle)
        if not isinstance(current, Supported):
            logger.info("%s cannot report addresses, not waiting", self.name())
            return None

        def probe() -> Optional[str]:
            result = self.ipv4(handle)
            if isinstance(result, Supported) and result.value is not None:
                return str(result.value)
            return None

        initial = str(current.value) if current.value is not None else None
        poller = poller or ReadinessPoller()
        return poller.wait_for(probe, initial).address

    def _headers(self) -> dict[str, str]:
        """Auth headers for the provider API."""
        return {}

    def _request(self, method: str, url: str, *, json: Any = None) -> requests.Response:
        """Send one request; any transport or HTTP status failure raises TransportError."""
        try:
            resp = self._session.request(
                method,
                url,
                headers=self._headers(),
                json=json,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(method, url, str(e)) from e
        return resp

    def _request_json(self, method: str, url: str, *, json: Any = None) -> Any:
        resp = self._request(method, url, json=json)
        try:
            return resp.json()
        except requests.RequestException as e:
            raise TransportError(method, url, f"invalid JSON body: {e}") from e
