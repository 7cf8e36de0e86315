import ipaddress

import pytest

from plugin_sdk.core import (
    ConstraintValidator,
    IssueKind,
    Required,
    ValidHost,
    ValidPort,
)
from plugin_sdk.injection import InjectionMarker, attribute, element


@pytest.mark.parametrize("value", [None, "", [], (), {}, b""])
def test_required_rejects_missing_and_empty(value: object) -> None:
    assert not Required().is_valid(value)


@pytest.mark.parametrize("value", ["x", 0, False, [1], {"a": 1}])
def test_required_accepts_present_values(value: object) -> None:
    assert Required().is_valid(value)


@pytest.mark.parametrize(
    "host",
    [
        "localhost",
        "logs.example.com",
        "logs.example.com.",
        "10.0.0.1",
        "::1",
        ipaddress.ip_address("192.168.1.1"),
    ],
)
def test_valid_host(host: object) -> None:
    assert ValidHost().is_valid(host)


@pytest.mark.parametrize(
    "host", [None, "", "bad_host", "-lead.example.com", "a..b", "x" * 64]
)
def test_invalid_host(host: object) -> None:
    assert not ValidHost().is_valid(host)


@pytest.mark.parametrize("port", [0, 514, 65535, "8080"])
def test_valid_port(port: object) -> None:
    assert ValidPort().is_valid(port)


@pytest.mark.parametrize("port", [None, -1, 65536, "http", True, 80.0])
def test_invalid_port(port: object) -> None:
    assert not ValidPort().is_valid(port)


def test_issue_kinds_and_messages() -> None:
    assert Required().issue_kind is IssueKind.MISSING_REQUIRED_VALUE
    assert ValidPort().issue_kind is IssueKind.INVALID_VALUE
    assert Required("need it").message == "need it"
    assert isinstance(ValidHost(), ConstraintValidator)


def test_required_flag_adds_a_leading_required() -> None:
    marker: InjectionMarker = attribute(required=True, validators=[ValidPort()])

    assert marker.required
    assert marker.validators == (Required(), ValidPort())


def test_explicit_required_is_not_duplicated() -> None:
    custom = Required("a layout is needed")
    marker: InjectionMarker = element(required=True, validators=[custom])

    assert marker.validators == (custom,)


def test_non_validators_are_rejected() -> None:
    with pytest.raises(TypeError):
        attribute(validators=["port"])
