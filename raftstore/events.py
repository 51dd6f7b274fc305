"""Replication metrics, replication stream states and the events exchanged with it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .types import LeaderId, LogId, Vote


def _debug(value: Any) -> str:
    return "None" if value is None else f"Some({value!r})"


@dataclass
class ReplicationMetrics:
    """The log id known to be replicated on a target."""

    matched_leader_id: LeaderId = field(default_factory=LeaderId)
    matched_index: int = 0

    def matched(self) -> LogId:
        return LogId(self.matched_leader_id, self.matched_index)

    def summary(self) -> str:
        return str(self.matched())


_REPL_STATES = ("line_rate", "snapshotting", "shutdown")


@dataclass(frozen=True)
class TargetReplState:
    """The state of a replication stream.

    ``kind`` is one of ``line_rate``, ``snapshotting`` or ``shutdown``; only a
    snapshotting state carries ``must_include``.
    """

    kind: str
    must_include: Optional[LogId] = None

    def __post_init__(self) -> None:
        if self.kind not in _REPL_STATES:
            raise ValueError(f"unknown replication state: {self.kind!r}")
        if self.kind != "snapshotting" and self.must_include is not None:
            raise ValueError(f"state {self.kind!r} takes no must_include")


TargetReplState.LINE_RATE = TargetReplState("line_rate")  # type: ignore[attr-defined]
TargetReplState.SHUTDOWN = TargetReplState("shutdown")  # type: ignore[attr-defined]


@dataclass(frozen=True)
class Replicate:
    """A new entry was appended and needs replicating."""

    appended: LogId
    committed: Optional[LogId]

    def summary(self) -> str:
        return (
            f"Replicate: appended: {self.appended!r}, "
            f"committed: {_debug(self.committed)}"
        )


@dataclass(frozen=True)
class UpdateCommittedLogId:
    """The leader has a new committed log id."""

    committed: Optional[LogId]

    def summary(self) -> str:
        return f"UpdateCommitIndex: commit_index: {_debug(self.committed)}"


@dataclass(frozen=True)
class UpdateMatched:
    """A target has matched the leader's log up to ``matched``."""

    target: int
    matched: LogId

    def summary(self) -> str:
        return f"UpdateMatchIndex: target: {self.target}, matched: {self.matched!r}"


@dataclass(frozen=True)
class RevertToFollower:
    """A target has seen a higher vote; the leader must step down."""

    target: int
    vote: Vote

    def summary(self) -> str:
        return f"RevertToFollower: target: {self.target}, vote: {self.vote}"


@dataclass(frozen=True)
class NeedsSnapshot:
    """A replication stream asks for a snapshot including ``must_include``.

    ``tx`` is where the snapshot is delivered once it is ready.
    """

    target: int
    must_include: Optional[LogId]
    tx: Any = field(default=None, compare=False)

    def summary(self) -> str:
        return (
            f"NeedsSnapshot: target: {self.target}, "
            f"must_include: {_debug(self.must_include)}"
        )


@dataclass(frozen=True)
class ReplicaShutdown:
    """A critical error occurred and the node must shut down."""

    def summary(self) -> str:
        return "Shutdown"