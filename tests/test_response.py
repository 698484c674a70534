"""Tests for xnode_deployer.response."""

from ipaddress import IPv4Address

import pytest

from xnode_deployer.response import (
    dig,
    expect_array,
    expect_object,
    expect_uint,
    first,
    parse_ipv4,
    require,
)


class _Boom(Exception):
    def __init__(self, payload=None):
        self.payload = payload
        super().__init__(payload)


class _Empty(Exception):
    pass


class TestStrictHelpers:
    @pytest.mark.parametrize("value", [[], "x", 1, None, True])
    def test_expect_object_rejects_non_objects(self, value):
        with pytest.raises(_Boom) as exc:
            expect_object(value, _Boom)
        assert exc.value.payload == value

    def test_expect_object_passes_dict(self):
        assert expect_object({"a": 1}, _Boom) == {"a": 1}

    def test_require_carries_whole_object(self):
        obj = {"other": 1}
        with pytest.raises(_Boom) as exc:
            require(obj, "deviceId", _Boom)
        assert exc.value.payload == obj

    def test_require_returns_null_values(self):
        assert require({"id": None}, "id", _Boom) is None

    @pytest.mark.parametrize("value", [0, 42, 2**64 - 1])
    def test_expect_uint_accepts(self, value):
        assert expect_uint(value, _Boom) == value

    @pytest.mark.parametrize("value", [-1, 2**64, 4.0, 4.5, "42", True, False, None, [42], {"id": 42}])
    def test_expect_uint_rejects(self, value):
        with pytest.raises(_Boom) as exc:
            expect_uint(value, _Boom)
        assert exc.value.payload == value

    def test_expect_array(self):
        assert expect_array([1], _Boom) == [1]
        with pytest.raises(_Boom):
            expect_array({"0": 1}, _Boom)

    def test_first_of_empty_raises_dedicated_error(self):
        with pytest.raises(_Empty):
            first([], _Empty)

    def test_first_returns_first_element(self):
        assert first([{"id": 1}, {"id": 2}], _Empty) == {"id": 1}


class TestLenientHelpers:
    def test_dig_nested(self):
        assert dig({"instance": {"floating_ip": "1.2.3.4"}}, "instance", "floating_ip") == "1.2.3.4"

    @pytest.mark.parametrize("value", [None, [], "x", {"instance": "x"}, {"instance": None}, {}])
    def test_dig_mismatch_returns_none(self, value):
        assert dig(value, "instance", "floating_ip") is None

    def test_parse_ipv4_valid(self):
        assert parse_ipv4("203.0.113.7") == IPv4Address("203.0.113.7")

    @pytest.mark.parametrize(
        "value",
        [None, 12345, ["1.2.3.4"], "", "1.2.3", "1.2.3.4.5", "256.1.1.1", "::1", " 1.2.3.4", "1.2.3.4/32", "01.2.3.4"],
    )
    def test_parse_ipv4_invalid(self, value):
        assert parse_ipv4(value) is None
