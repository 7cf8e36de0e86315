"""Diagnostics recorded while building a configuration graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import (
    AmbiguousBindingError,
    ConfigurationError,
    ConstructionFailedError,
    ConversionFailureError,
    InvalidValueError,
    MissingRequiredValueError,
    UnconsumedInputError,
    UnresolvedPluginError,
)


class IssueKind(str, Enum):
    UNRESOLVED_PLUGIN = "UnresolvedPlugin"
    MISSING_REQUIRED_VALUE = "MissingRequiredValue"
    CONVERSION_FAILURE = "ConversionFailure"
    INVALID_VALUE = "InvalidValue"
    AMBIGUOUS_BINDING = "AmbiguousBinding"
    UNCONSUMED_INPUT = "UnconsumedInput"
    CONSTRUCTION_FAILED = "ConstructionFailed"

    @property
    def severity(self) -> int:
        if self in (IssueKind.AMBIGUOUS_BINDING, IssueKind.UNCONSUMED_INPUT):
            return logging.WARNING
        return logging.ERROR


_ERROR_TYPES: dict[IssueKind, type[ConfigurationError]] = {
    IssueKind.UNRESOLVED_PLUGIN: UnresolvedPluginError,
    IssueKind.MISSING_REQUIRED_VALUE: MissingRequiredValueError,
    IssueKind.CONVERSION_FAILURE: ConversionFailureError,
    IssueKind.INVALID_VALUE: InvalidValueError,
    IssueKind.AMBIGUOUS_BINDING: AmbiguousBindingError,
    IssueKind.UNCONSUMED_INPUT: UnconsumedInputError,
    IssueKind.CONSTRUCTION_FAILED: ConstructionFailedError,
}


@dataclass(frozen=True, slots=True)
class BuildIssue:
    kind: IssueKind
    severity: int
    node_path: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity >= logging.ERROR

    def to_error(self) -> ConfigurationError:
        """The exception form of this issue, for callers that want to raise."""
        return _ERROR_TYPES[self.kind](f"{self.node_path}: {self.message}")
