"""Constraint validators checked on injected values before construction.

A validator is attached to an injection marker (``validators=``) and runs
once the node has been injected. ``required=True`` on a marker is shorthand
for a leading :class:`Required`.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Collection
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .issues import IssueKind

_HOST_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
_MAX_PORT = 65535


@runtime_checkable
class ConstraintValidator(Protocol):
    issue_kind: IssueKind
    message: str

    def is_valid(self, value: Any) -> bool: ...


@dataclass(frozen=True, slots=True)
class Required:
    """Rejects ``None`` and empty strings or collections."""

    message: str = "The parameter is null"
    issue_kind: IssueKind = IssueKind.MISSING_REQUIRED_VALUE

    def is_valid(self, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, (str, bytes, Collection)):
            return len(value) > 0
        return True


@dataclass(frozen=True, slots=True)
class ValidHost:
    """Accepts IP literals and syntactically valid host names.

    No name lookup is made.
    """

    message: str = "The hostname is invalid"
    issue_kind: IssueKind = IssueKind.INVALID_VALUE

    def is_valid(self, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            return True
        host = str(value)
        try:
            ipaddress.ip_address(host)
        except ValueError:
            pass
        else:
            return True
        if len(host) > 253:
            return False
        labels = host[:-1].split(".") if host.endswith(".") else host.split(".")
        return all(_HOST_LABEL.match(label) for label in labels)


@dataclass(frozen=True, slots=True)
class ValidPort:
    message: str = "The port number is invalid"
    issue_kind: IssueKind = IssueKind.INVALID_VALUE

    def is_valid(self, value: Any) -> bool:
        if isinstance(value, str):
            try:
                value = int(value)
            except ValueError:
                return False
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        return 0 <= value <= _MAX_PORT


def has_required(validators: tuple[ConstraintValidator, ...]) -> bool:
    return any(isinstance(validator, Required) for validator in validators)
