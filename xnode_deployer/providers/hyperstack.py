"""Hyperstack provider: GPU virtual machines via the Infrahub core API."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from ipaddress import IPv4Address
from typing import Any, Optional

import requests

from xnode_deployer.errors import Error, XnodeDeployerError, format_payload
from xnode_deployer.models import (
    DeployInput,
    HardwareSpec,
    OptionalSupport,
    Supported,
    hardware_from_dict,
)
from xnode_deployer.providers.base import DEFAULT_TIMEOUT, XnodeDeployer
from xnode_deployer.providers.registry import register
from xnode_deployer.readiness import ReadinessPoller
from xnode_deployer.response import (
    dig,
    expect_array,
    expect_object,
    expect_uint,
    first,
    parse_ipv4,
    require,
)

logger = logging.getLogger(__name__)

_API_BASE = "https://infrahub-api.nexgencloud.com/v1/core"
_IMAGE_NAME = "Ubuntu Server 22.04 LTS (Jammy Jellyfish)"

# Open every TCP and UDP port; the xnode manages its own firewall.
_SECURITY_RULES = [
    {
        "direction": "ingress",
        "protocol": protocol,
        "ethertype": "IPv4",
        "remote_ip_prefix": "0.0.0.0/0",
        "port_range_min": 1,
        "port_range_max": 65535,
    }
    for protocol in ("tcp", "udp")
]


class HyperstackError(XnodeDeployerError):
    """Hyperstack answered with a body that could not be interpreted."""

    provider = "hyperstack"


class ResponseNotObject(HyperstackError):
    def __init__(self, response: Any):
        super().__init__(
            f"Hyperstack response not object: {format_payload(response)}",
            payload=response,
        )


class ResponseMissingInstances(HyperstackError):
    def __init__(self, response: dict):
        super().__init__(
            f"Hyperstack response missing instances: {format_payload(response)}",
            payload=response,
        )


class ResponseInvalidInstances(HyperstackError):
    def __init__(self, instances: Any):
        super().__init__(
            f"Hyperstack response invalid instances: {format_payload(instances)}",
            payload=instances,
        )


class ResponseEmptyInstances(HyperstackError):
    def __init__(self):
        super().__init__("Hyperstack response empty instances")


class ResponseMissingId(HyperstackError):
    def __init__(self, instance: dict):
        super().__init__(
            f"Hyperstack response missing id: {format_payload(instance)}",
            payload=instance,
        )


class ResponseInvalidId(HyperstackError):
    def __init__(self, id: Any):
        super().__init__(
            f"Hyperstack response invalid id: {format_payload(id)}",
            payload=id,
        )


@dataclass(frozen=True)
class HyperstackVirtualMachine(HardwareSpec):
    # https://docs.hyperstack.cloud/docs/api-reference/core-resources/virtual-machines/vm-core/create-vms
    name: str
    environment_name: str
    flavor_name: str
    key_name: str

    kind = "VirtualMachine"
    scope = "virtual-machines"


HARDWARE_KINDS: dict[str, type] = {
    HyperstackVirtualMachine.kind: HyperstackVirtualMachine,
}


def hyperstack_hardware_from_dict(data: dict) -> HyperstackVirtualMachine:
    return hardware_from_dict(HARDWARE_KINDS, data)


@dataclass(frozen=True)
class HyperstackOutput:
    """Handle for a Hyperstack VM. ``ip`` is set when deploy waited for it."""

    id: int
    ip: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> HyperstackOutput:
        return cls(id=int(data["id"]), ip=data.get("ip"))


def parse_created_instance(response: Any) -> tuple[int, dict]:
    """Return ``(id, instance)`` for the first instance of a create response."""
    body = expect_object(response, ResponseNotObject)
    instances = require(body, "instances", ResponseMissingInstances)
    instances = expect_array(instances, ResponseInvalidInstances)
    instance = first(instances, ResponseEmptyInstances)
    # A non-object instance is reported with the whole response for context.
    if not isinstance(instance, dict):
        raise ResponseNotObject(response)
    id = require(instance, "id", ResponseMissingId)
    return expect_uint(id, ResponseInvalidId), instance


class HyperstackDeployer(XnodeDeployer):
    """Deploy xnodes on Hyperstack virtual machines.

    With ``wait_for_ip`` (the default) ``deploy`` blocks until the floating
    IP is attached, re-reading the VM through ``poller``.
    """

    hardware_types = (HyperstackVirtualMachine,)

    def __init__(
        self,
        api_key: str,
        hardware: HyperstackVirtualMachine,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        wait_for_ip: bool = True,
        poller: Optional[ReadinessPoller] = None,
    ):
        super().__init__(api_key, hardware, session=session, timeout=timeout)
        self.wait_for_ip = wait_for_ip
        self.poller = poller or ReadinessPoller(address_key="floating_ip")

    def name(self) -> str:
        return "hyperstack"

    def _headers(self) -> dict[str, str]:
        return {"api_key": self.api_key}

    def _vm_url(self, id: int) -> str:
        return f"{_API_BASE}/{self.hardware.scope}/{id}"

    def build_create_payload(self, input: DeployInput) -> dict[str, Any]:
        hw = self.hardware
        return {
            "name": hw.name,
            "environment_name": hw.environment_name,
            "image_name": _IMAGE_NAME,
            "flavor_name": hw.flavor_name,
            "key_name": hw.key_name,
            "count": 1,
            "assign_floating_ip": True,
            "user_data": input.cloud_init(),
            "security_rules": [dict(rule) for rule in _SECURITY_RULES],
        }

    def _fetch_instance(self, id: int) -> Any:
        return dig(self._request_json("GET", self._vm_url(id)), "instance")

    def deploy(self, input: DeployInput) -> HyperstackOutput:
        logger.info("Hyperstack deployment of %r on %r started", input, self.hardware)
        response = self._request_json(
            "POST",
            f"{_API_BASE}/{self.hardware.scope}",
            json=self.build_create_payload(input),
        )
        id, instance = parse_created_instance(response)

        ip = None
        if self.wait_for_ip:
            logger.info("Waiting for hyperstack vm %s to get a floating ip", id)
            try:
                ready = self.poller.wait(instance, lambda: self._fetch_instance(id))
            except Error as e:
                e.handle = HyperstackOutput(id=id)
                raise
            ip = ready.address

        output = HyperstackOutput(id=id, ip=ip)
        logger.info("Hyperstack deployment succeeded: %r", output)
        return output

    def undeploy(self, handle: HyperstackOutput) -> None:
        id = handle.id
        logger.info("Undeploying hyperstack vm %s started", id)
        self._request("DELETE", self._vm_url(id))
        logger.info("Undeploying hyperstack vm %s succeeded", id)

    def ipv4(self, handle: HyperstackOutput) -> OptionalSupport[Optional[IPv4Address]]:
        response = self._request_json("GET", self._vm_url(handle.id))
        return Supported(parse_ipv4(dig(response, "instance", "floating_ip")))

    def handle_from_dict(self, data: dict) -> HyperstackOutput:
        return HyperstackOutput.from_dict(data)


register("hyperstack", HyperstackDeployer)
