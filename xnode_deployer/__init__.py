"""Deploy xnodes on heterogeneous hosting providers behind one interface."""

from xnode_deployer.errors import Error, ReadinessTimeout, TransportError, XnodeDeployerError
from xnode_deployer.models import (
    NOT_SUPPORTED,
    DeployInput,
    DeployOutput,
    NotSupported,
    OptionalSupport,
    Supported,
)
from xnode_deployer.providers.base import XnodeDeployer
from xnode_deployer.readiness import ReadinessPoller

__all__ = [
    "DeployInput",
    "DeployOutput",
    "Error",
    "NOT_SUPPORTED",
    "NotSupported",
    "OptionalSupport",
    "ReadinessPoller",
    "ReadinessTimeout",
    "Supported",
    "TransportError",
    "XnodeDeployer",
    "XnodeDeployerError",
]
