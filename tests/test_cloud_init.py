"""Tests for xnode_deployer.cloud_init."""

import itertools
import re

from xnode_deployer.cloud_init import (
    ENV_FIELDS,
    INSTALL_SCRIPT_URL,
    compose_env,
    render_cloud_init,
)
from xnode_deployer.models import DeployInput

ALL_FIELDS = dict(
    xnode_owner="0xowner",
    domain="a.com",
    acme_email="admin@a.com",
    user_passwd="hunter2",
    encrypted="ZW5j",
    initial_config="cfg",
)


class TestComposeEnv:
    def test_empty_input_has_no_exports(self):
        assert compose_env(DeployInput()) == ""

    def test_single_field(self):
        assert compose_env(DeployInput(domain="a.com")) == 'export DOMAIN="a.com" && '

    def test_all_fields_in_fixed_order(self):
        env = compose_env(DeployInput(**ALL_FIELDS))
        assert env == (
            'export XNODE_OWNER="0xowner" && '
            'export DOMAIN="a.com" && '
            'export ACME_EMAIL="admin@a.com" && '
            'export USER_PASSWD="hunter2" && '
            'export ENCRYPTED="ZW5j" && '
            'export INITIAL_CONFIG="cfg" && '
        )

    def test_every_subset_exports_exactly_present_fields(self):
        attrs = [attr for _, attr in ENV_FIELDS]
        for size in range(len(attrs) + 1):
            for subset in itertools.combinations(attrs, size):
                env = compose_env(DeployInput(**{a: ALL_FIELDS[a] for a in subset}))
                names = re.findall(r"export (\w+)=", env)
                expected = [name for name, attr in ENV_FIELDS if attr in subset]
                assert names == expected

    def test_empty_string_is_present(self):
        assert compose_env(DeployInput(domain="")) == 'export DOMAIN="" && '


class TestRenderCloudInit:
    def test_domain_only_scenario(self):
        script = render_cloud_init(DeployInput(domain="a.com"))
        assert 'export DOMAIN="a.com" &&' in script
        assert script.count("export ") == 1

    def test_exact_template(self):
        script = render_cloud_init(DeployInput(domain="a.com"))
        assert script == (
            "#cloud-config\n"
            "runcmd:\n"
            f' - export DOMAIN="a.com" &&  curl {INSTALL_SCRIPT_URL} | bash 2>&1 | tee /tmp/xnodeos.log'
        )

    def test_empty_input_still_well_formed(self):
        script = render_cloud_init(DeployInput())
        assert script.startswith("#cloud-config\nruncmd:\n - ")
        assert script.endswith(f"curl {INSTALL_SCRIPT_URL} | bash 2>&1 | tee /tmp/xnodeos.log")
        assert "export" not in script

    def test_braces_in_values_are_not_expanded(self):
        script = render_cloud_init(DeployInput(initial_config="{install_url}"))
        assert 'export INITIAL_CONFIG="{install_url}" && ' in script

    def test_deploy_input_method_delegates(self):
        input = DeployInput(xnode_owner="0xowner")
        assert input.cloud_init() == render_cloud_init(input)
