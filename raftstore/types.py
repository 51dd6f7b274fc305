"""Identifiers and small value types shared across the raft store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class LeaderId:
    """Identifies a leader by the term it was elected in and its node id."""

    term: int = 0
    node_id: int = 0

    def __str__(self) -> str:
        return f"{self.term}-{self.node_id}"


@dataclass(frozen=True, order=True)
class LogId:
    """The identity of a raft log entry: the leader that proposed it and its index."""

    leader_id: LeaderId = field(default_factory=LeaderId)
    index: int = 0

    @classmethod
    def create(cls, leader_id: LeaderId, index: int) -> "LogId":
        """Build a log id, checking that the zero-th entry is exactly (0, 0, 0)."""
        if leader_id.term == 0 or index == 0:
            if leader_id.term != 0 or leader_id.node_id != 0 or index != 0:
                raise ValueError(
                    f"zero-th log entry must be (0,0,0), but {leader_id} {index}"
                )
        return cls(leader_id, index)

    def __str__(self) -> str:
        return f"{self.leader_id}-{self.index}"


@dataclass(order=True)
class Vote:
    """The privilege of a node: a term, the voted node and whether it is committed."""

    term: int = 0
    node_id: int = 0
    committed: bool = False

    @classmethod
    def committed_vote(cls, term: int, node_id: int) -> "Vote":
        return cls(term, node_id, True)

    def commit(self) -> None:
        self.committed = True

    def leader_id(self) -> LeaderId:
        return LeaderId(self.term, self.node_id)

    def leader(self) -> Optional[int]:
        """The leader node id, known only once the vote is committed."""
        return self.node_id if self.committed else None

    def __str__(self) -> str:
        return f"vote:{self.term}-{self.node_id}"


@dataclass(order=True)
class SnapshotSegmentId:
    """The identity of a segment of a snapshot."""

    id: str = ""
    offset: int = 0

    @classmethod
    def from_pair(cls, pair: Tuple[Any, int]) -> "SnapshotSegmentId":
        snapshot_id, offset = pair
        return cls(str(snapshot_id), offset)

    def __str__(self) -> str:
        return f"{self.id}+{self.offset}"


class _AsIs:
    def __repr__(self) -> str:
        return "AS_IS"


_AS_IS: Any = _AsIs()


@dataclass(frozen=True)
class Update(Generic[T]):
    """Either replace a value with ``value`` or leave it as it is."""

    value: Any = _AS_IS

    @classmethod
    def as_is(cls) -> "Update[Any]":
        return cls()

    def is_as_is(self) -> bool:
        return self.value is _AS_IS

    def __repr__(self) -> str:
        if self.is_as_is():
            return "Update.as_is()"
        return f"Update({self.value!r})"


@dataclass(frozen=True)
class StateMachineChanges:
    """The changes of a state machine after applying logs or installing a snapshot."""

    last_applied: LogId
    is_snapshot: bool


def log_id_summary(log_id: Optional[LogId]) -> str:
    return "None" if log_id is None else str(log_id)


def log_index(log_id: Optional[LogId]) -> Optional[int]:
    return None if log_id is None else log_id.index


def log_next_index(log_id: Optional[LogId]) -> int:
    return 0 if log_id is None else log_id.index + 1


def next_index(index: Optional[int]) -> int:
    return 0 if index is None else index + 1


def prev_index(index: Optional[int]) -> Optional[int]:
    if index is None:
        raise ValueError("None has no previous value")
    return None if index == 0 else index - 1


def add_index(index: Optional[int], v: int) -> Optional[int]:
    return prev_index(next_index(index) + v)