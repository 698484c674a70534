"""Hivelocity provider: bare metal and VPS xnodes via the Hivelocity v2 API."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from ipaddress import IPv4Address
from typing import Any, Optional

from xnode_deployer.errors import XnodeDeployerError, format_payload
from xnode_deployer.models import (
    DeployInput,
    HardwareSpec,
    OptionalSupport,
    Supported,
    hardware_from_dict,
)
from xnode_deployer.providers.base import XnodeDeployer
from xnode_deployer.providers.registry import register
from xnode_deployer.response import dig, expect_object, expect_uint, parse_ipv4, require

logger = logging.getLogger(__name__)

_API_BASE = "https://core.hivelocity.net/api/v2"


class HivelocityError(XnodeDeployerError):
    """Hivelocity answered with a body that could not be interpreted."""

    provider = "hivelocity"


class ResponseNotObject(HivelocityError):
    def __init__(self, response: Any):
        super().__init__(
            f"Hivelocity response not object: {format_payload(response)}",
            payload=response,
        )


class ResponseMissingDeviceId(HivelocityError):
    def __init__(self, response: dict):
        super().__init__(
            f"Hivelocity response missing device id: {format_payload(response)}",
            payload=response,
        )


class ResponseInvalidDeviceId(HivelocityError):
    def __init__(self, device_id: Any):
        super().__init__(
            f"Hivelocity response invalid device id: {format_payload(device_id)}",
            payload=device_id,
        )


@dataclass(frozen=True)
class _HivelocityHardware(HardwareSpec):
    location_name: str
    period: str
    product_id: int
    hostname: str
    tags: Optional[list[str]] = None

    scope = ""
    os_name = ""


@dataclass(frozen=True)
class HivelocityBareMetal(_HivelocityHardware):
    # https://developers.hivelocity.net/reference/post_bare_metal_device_resource
    kind = "BareMetal"
    scope = "bare-metal-devices"
    os_name = "Ubuntu 24.04"


@dataclass(frozen=True)
class HivelocityCompute(_HivelocityHardware):
    # https://developers.hivelocity.net/reference/post_compute_resource
    kind = "Compute"
    scope = "compute"
    os_name = "Ubuntu 24.04 (VPS)"


HARDWARE_KINDS: dict[str, type] = {
    HivelocityBareMetal.kind: HivelocityBareMetal,
    HivelocityCompute.kind: HivelocityCompute,
}


def hivelocity_hardware_from_dict(data: dict) -> _HivelocityHardware:
    return hardware_from_dict(HARDWARE_KINDS, data)


@dataclass(frozen=True)
class HivelocityOutput:
    """Handle for a Hivelocity device."""

    device_id: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> HivelocityOutput:
        return cls(device_id=int(data["device_id"]))


def parse_device_id(response: Any) -> int:
    """Pull ``deviceId`` out of a create response."""
    body = expect_object(response, ResponseNotObject)
    device_id = require(body, "deviceId", ResponseMissingDeviceId)
    return expect_uint(device_id, ResponseInvalidDeviceId)


class HivelocityDeployer(XnodeDeployer):
    """Deploy xnodes on Hivelocity bare metal or compute (VPS)."""

    hardware_types = (HivelocityBareMetal, HivelocityCompute)

    def name(self) -> str:
        return "hivelocity"

    def _headers(self) -> dict[str, str]:
        return {"X-API-KEY": self.api_key}

    def _device_url(self, device_id: int) -> str:
        return f"{_API_BASE}/{self.hardware.scope}/{device_id}"

    def build_create_payload(self, input: DeployInput) -> dict[str, Any]:
        hw = self.hardware
        return {
            "locationName": hw.location_name,
            "period": hw.period,
            "tags": list(hw.tags) if hw.tags is not None else None,
            "script": input.cloud_init(),
            "productId": hw.product_id,
            "osName": hw.os_name,
            "hostname": hw.hostname,
        }

    def deploy(self, input: DeployInput) -> HivelocityOutput:
        logger.info("Hivelocity deployment of %r on %r started", input, self.hardware)
        response = self._request_json(
            "POST",
            f"{_API_BASE}/{self.hardware.scope}/",
            json=self.build_create_payload(input),
        )

        output = HivelocityOutput(device_id=parse_device_id(response))
        logger.info("Hivelocity deployment succeeded: %r", output)
        return output

    def undeploy(self, handle: HivelocityOutput) -> None:
        device_id = handle.device_id
        logger.info("Undeploying hivelocity device %s started", device_id)
        self._request("DELETE", self._device_url(device_id))
        logger.info("Undeploying hivelocity device %s succeeded", device_id)

    def ipv4(self, handle: HivelocityOutput) -> OptionalSupport[Optional[IPv4Address]]:
        response = self._request_json("GET", self._device_url(handle.device_id))
        return Supported(parse_ipv4(dig(response, "primaryIp")))

    def handle_from_dict(self, data: dict) -> HivelocityOutput:
        return HivelocityOutput.from_dict(data)


register("hivelocity", HivelocityDeployer)
