"""Tests for xnode_deployer.models."""

import dataclasses

import pytest

from xnode_deployer.models import (
    NOT_SUPPORTED,
    DeployInput,
    DeployOutput,
    NotSupported,
    Supported,
    hardware_from_dict,
)
from xnode_deployer.providers.hivelocity import HivelocityBareMetal, HivelocityCompute


class TestDeployInput:
    def test_all_fields_default_to_none(self):
        input = DeployInput()
        assert all(getattr(input, f.name) is None for f in dataclasses.fields(input))

    def test_is_immutable(self):
        input = DeployInput(domain="a.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            input.domain = "b.com"

    def test_dict_roundtrip(self):
        input = DeployInput(domain="a.com", acme_email="admin@a.com")
        assert DeployInput.from_dict(input.to_dict()) == input

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="Unknown DeployInput fields"):
            DeployInput.from_dict({"domian": "a.com"})

    def test_repr_hides_values(self):
        text = repr(DeployInput(user_passwd="hunter2", domain="a.com"))
        assert "hunter2" not in text
        assert "user_passwd" in text


class TestOptionalSupport:
    def test_supported_none_is_distinct_from_not_supported(self):
        assert Supported(None) != NOT_SUPPORTED
        assert Supported(None).is_supported
        assert not NOT_SUPPORTED.is_supported

    def test_not_supported_instances_are_equal(self):
        assert NotSupported() == NOT_SUPPORTED

    def test_supported_compares_by_value(self):
        assert Supported("1.2.3.4") == Supported("1.2.3.4")
        assert Supported("1.2.3.4") != Supported(None)

    def test_deploy_output_pairs_ip_and_handle(self):
        out = DeployOutput(ip="1.2.3.4", provider={"id": 1})
        assert out.ip == "1.2.3.4"
        assert out.provider == {"id": 1}


class TestHardwareFromDict:
    VARIANTS = {"BareMetal": HivelocityBareMetal, "Compute": HivelocityCompute}

    def _data(self, **overrides):
        data = dict(
            kind="Compute",
            location_name="DAL1",
            period="hourly",
            product_id=2313,
            hostname="xnode",
        )
        data.update(overrides)
        return data

    def test_builds_tagged_variant(self):
        hw = hardware_from_dict(self.VARIANTS, self._data())
        assert isinstance(hw, HivelocityCompute)
        assert hw.tags is None

    def test_roundtrip_through_to_dict(self):
        hw = hardware_from_dict(self.VARIANTS, self._data(tags=["a", "b"]))
        assert hardware_from_dict(self.VARIANTS, hw.to_dict()) == hw
        assert hw.to_dict()["kind"] == "Compute"

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown hardware kind"):
            hardware_from_dict(self.VARIANTS, self._data(kind="Gpu"))

    def test_unknown_field_raises(self):
        with pytest.raises(ValueError, match="Unknown keys in Compute hardware"):
            hardware_from_dict(self.VARIANTS, self._data(flavor="x"))

    def test_missing_field_raises(self):
        data = self._data()
        del data["hostname"]
        with pytest.raises(ValueError, match="Missing keys in Compute hardware"):
            hardware_from_dict(self.VARIANTS, data)

    def test_non_mapping_raises(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            hardware_from_dict(self.VARIANTS, ["Compute"])
