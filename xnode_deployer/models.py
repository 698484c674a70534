"""Data models shared by every deployer."""

from __future__ import annotations

from dataclasses import MISSING, asdict, dataclass, fields
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")
H = TypeVar("H")


@dataclass(frozen=True)
class DeployInput:
    """Per-xnode settings baked into the boot script. Every field is optional."""

    xnode_owner: Optional[str] = None
    domain: Optional[str] = None
    acme_email: Optional[str] = None
    user_passwd: Optional[str] = None
    encrypted: Optional[str] = None
    initial_config: Optional[str] = None

    def cloud_init(self) -> str:
        from xnode_deployer.cloud_init import render_cloud_init

        return render_cloud_init(self)

    def to_dict(self) -> dict[str, Optional[str]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeployInput:
        allowed = {f.name for f in fields(cls)}
        unknown = set(data) - allowed
        if unknown:
            raise ValueError(
                f"Unknown DeployInput fields: {sorted(unknown)}. "
                f"Allowed: {sorted(allowed)}"
            )
        return cls(**data)

    def __repr__(self) -> str:
        # Secrets stay out of log lines.
        present = [f.name for f in fields(self) if getattr(self, f.name) is not None]
        return f"DeployInput(present={present})"


@dataclass(frozen=True)
class Supported(Generic[T]):
    """The provider implements the capability; ``value`` may still be None."""

    value: T

    @property
    def is_supported(self) -> bool:
        return True


@dataclass(frozen=True)
class NotSupported:
    """The provider does not implement the capability at all."""

    @property
    def is_supported(self) -> bool:
        return False


NOT_SUPPORTED = NotSupported()

OptionalSupport = Union[Supported[T], NotSupported]


@dataclass(frozen=True)
class DeployOutput(Generic[H]):
    """A provider handle together with the address it became reachable on."""

    ip: Optional[str]
    provider: H


class HardwareSpec:
    """Mixin for hardware variants; subclasses are frozen dataclasses with a ``kind`` tag."""

    kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


def hardware_from_dict(variants: dict[str, type], data: dict[str, Any]) -> Any:
    """Build the hardware variant tagged by ``data["kind"]``.

    Unknown kinds and unknown fields raise ``ValueError`` so typos in
    config files are caught early.
    """
    if not isinstance(data, dict):
        raise ValueError(f"hardware must be a mapping, got {type(data).__name__}")
    kind = data.get("kind")
    cls = variants.get(kind)
    if cls is None:
        raise ValueError(
            f"Unknown hardware kind: {kind!r}. Available: {sorted(variants)}"
        )
    params = {k: v for k, v in data.items() if k != "kind"}
    allowed = {f.name for f in fields(cls)}
    unknown = set(params) - allowed
    if unknown:
        raise ValueError(
            f"Unknown keys in {kind} hardware: {sorted(unknown)}. "
            f"Allowed: {sorted(allowed)}"
        )
    required = {
        f.name for f in fields(cls)
        if f.default is MISSING and f.default_factory is MISSING
    }
    missing = required - set(params)
    if missing:
        raise ValueError(f"Missing keys in {kind} hardware: {sorted(missing)}")
    return cls(**params)
