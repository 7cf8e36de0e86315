from __future__ import annotations

from typing import Any

from ..core.issues import BuildIssue, IssueKind
from ..core.node import Node
from ..logging import LoggingStatusSink, StatusSinkProtocol
from ..logging.protocol import ExcInfo
from .substitution import Substitutor, identity


class InjectionContext:
    """Per-build state shared by the injection engine and the builders.

    Collects :class:`BuildIssue` records and forwards every issue and trace
    line to the status sink. One context serves one tree and must not be
    shared between threads.
    """

    def __init__(
        self,
        *,
        substitutor: Substitutor | None = None,
        status: StatusSinkProtocol | None = None,
        configuration: Any = None,
    ) -> None:
        self.substitutor: Substitutor = substitutor or identity
        self.status: StatusSinkProtocol = status or LoggingStatusSink()
        self.configuration = configuration
        self.issues: list[BuildIssue] = []

    def substitute(self, raw: str) -> str:
        return self.substitutor(raw)

    def report(
        self,
        kind: IssueKind,
        node: Node,
        message: str,
        *args: object,
        exc_info: ExcInfo = None,
    ) -> BuildIssue:
        issue = BuildIssue(
            kind=kind,
            severity=kind.severity,
            node_path=node.path(),
            message=message % args if args else message,
        )
        self.issues.append(issue)
        self.status.record(
            issue.severity,
            "%s: %s",
            kind.value,
            issue.message,
            node_path=issue.node_path,
            exc_info=exc_info,
        )
        return issue

    def trace(self, level: int, message: str, *args: object, node: Node) -> None:
        self.status.record(level, message, *args, node_path=node.path())

    @property
    def has_errors(self) -> bool:
        return any(issue.is_error for issue in self.issues)
