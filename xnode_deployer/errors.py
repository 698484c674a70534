"""Exception hierarchy shared by all deployers.

``Error`` is the root. ``TransportError`` covers anything that went wrong
talking HTTP; ``XnodeDeployerError`` covers responses that arrived but could
not be interpreted. Each provider subclasses ``XnodeDeployerError`` with its
own structural variants (see ``xnode_deployer.providers``).
"""

from __future__ import annotations

import json
from typing import Any, Optional


class Error(Exception):
    """Root of every error raised by xnode_deployer.

    ``handle`` is set when the failure happened after an instance was
    created, so the caller can still persist it and undeploy it later.
    """

    handle: Any = None


class TransportError(Error):
    """The HTTP request failed, returned a non-success status, or was not JSON.

    The underlying ``requests`` exception is chained as ``__cause__``.
    """

    def __init__(self, method: str, url: str, reason: str):
        self.method = method
        self.url = url
        self.reason = reason
        super().__init__(f"{method} {url} failed: {reason}")


class XnodeDeployerError(Error):
    """A response could not be turned into a result.

    Raised bare, this is the generic deployer error. ``payload`` holds the
    raw JSON fragment that caused the failure, when there is one.
    """

    provider: Optional[str] = None

    def __init__(self, message: str = "", payload: Any = None):
        self.payload = payload
        super().__init__(message)


class ReadinessTimeout(XnodeDeployerError):
    """The instance never reported a usable address within the poll bounds."""

    def __init__(self, attempts: int, elapsed: float, instance: Any = None):
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            f"No address assigned after {attempts} polls ({elapsed:.1f}s)",
            payload=instance,
        )


def format_payload(value: Any) -> str:
    """Render a JSON fragment for an error message."""
    try:
        return json.dumps(value, sort_keys=True)
    except (TypeError, ValueError):
        return repr(value)
