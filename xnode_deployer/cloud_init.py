"""Cloud-init script generation for new xnodes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from xnode_deployer.template_engine import render_string

if TYPE_CHECKING:
    from xnode_deployer.models import DeployInput

INSTALL_SCRIPT_URL = (
    "https://raw.githubusercontent.com/Openmesh-Network/xnode-manager/main/os/install.sh"
)

CLOUD_INIT_TEMPLATE = (
    "#cloud-config\n"
    "runcmd:\n"
    " - {env} curl {install_url} | bash 2>&1 | tee /tmp/xnodeos.log"
)

# (environment variable, DeployInput attribute), in emission order.
ENV_FIELDS: tuple[tuple[str, str], ...] = (
    ("XNODE_OWNER", "xnode_owner"),
    ("DOMAIN", "domain"),
    ("ACME_EMAIL", "acme_email"),
    ("USER_PASSWD", "user_passwd"),
    ("ENCRYPTED", "encrypted"),
    ("INITIAL_CONFIG", "initial_config"),
)


def compose_env(input: DeployInput) -> str:
    """Return the ``export NAME="value" && `` prefix for every present field.

    Values are wrapped in double quotes and nothing else; callers must not
    pass values that break shell quoting.
    """
    exports = []
    for name, attr in ENV_FIELDS:
        value = getattr(input, attr)
        if value is not None:
            exports.append(f'export {name}="{value}" && ')
    return "".join(exports)


def render_cloud_init(input: DeployInput) -> str:
    """Render the boot script that installs XnodeOS on first boot."""
    return render_string(
        CLOUD_INIT_TEMPLATE,
        {"env": compose_env(input), "install_url": INSTALL_SCRIPT_URL},
    )
