"""The storage interface of a raft node and the data types it exchanges."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Generic, List, Optional, Sequence, Tuple, TypeVar

from .types import LogId, StateMachineChanges, Vote, log_next_index

R = TypeVar("R")

_MEMBERSHIP_SCAN_STEP = 64


def _log_id_lt(a: Optional[LogId], b: Optional[LogId]) -> bool:
    """Order optional log ids with ``None`` below every log id."""
    if b is None:
        return False
    if a is None:
        return True
    return a < b


@dataclass(frozen=True)
class Entry:
    """A raft log entry.

    An entry is blank when it carries neither ``payload`` nor ``membership``;
    a membership entry carries the new cluster config in ``membership``, and a
    normal entry carries application data in ``payload``.
    """

    log_id: LogId
    payload: Any = None
    membership: Any = None


@dataclass(frozen=True)
class EffectiveMembership:
    """A membership config together with the log id where it was found."""

    log_id: LogId
    membership: Any


@dataclass(frozen=True)
class SnapshotMeta:
    """Metadata of a snapshot: the last log id it includes and its unique id."""

    last_log_id: LogId
    snapshot_id: str


@dataclass
class Snapshot:
    """A snapshot's metadata and a readable, seekable handle to its data."""

    meta: SnapshotMeta
    snapshot: BinaryIO


@dataclass
class InitialState:
    """The state a raft node needs when it starts."""

    last_log_id: Optional[LogId] = None
    last_applied: Optional[LogId] = None
    vote: Vote = field(default_factory=Vote)
    last_membership: Optional[EffectiveMembership] = None


@dataclass
class LogState:
    """The state of the log.

    ``last_log_id`` is the id of the last present entry, or
    ``last_purged_log_id`` when no entry is present.
    """

    last_purged_log_id: Optional[LogId] = None
    last_log_id: Optional[LogId] = None


class RaftLogReader(ABC):
    """Read access to the raft log."""

    async def try_get_log_entry(self, log_index: int) -> Optional[Entry]:
        """Return the entry at ``log_index``, or ``None`` if it is not present."""
        entries = await self.try_get_log_entries(log_index, log_index + 1)
        return entries[-1] if entries else None

    @abstractmethod
    async def get_log_state(self) -> LogState:
        """Return the last purged log id and the last log id."""

    @abstractmethod
    async def try_get_log_entries(
        self, start: int, stop: Optional[int]
    ) -> List[Entry]:
        """Return the present entries in ``[start, stop)``; ``stop=None`` is unbounded."""


class RaftSnapshotBuilder(ABC):
    """Builds snapshots of the state machine."""

    @abstractmethod
    async def build_snapshot(self) -> Snapshot:
        """Build a snapshot that includes exactly all logs up to the last applied."""


class RaftStorage(RaftLogReader, Generic[R]):
    """The storage of a raft node: vote, log, state machine and snapshots."""

    async def get_membership(self) -> Optional[EffectiveMembership]:
        """Return the last membership config found in the log or the state machine."""
        _, sm_mem = await self.last_applied_state()
        sm_mem_index = 0 if sm_mem is None else sm_mem.log_id.index

        log_mem = await self.last_membership_in_log(sm_mem_index + 1)
        if log_mem is not None:
            return log_mem
        return sm_mem

    async def last_membership_in_log(
        self, since_index: int
    ) -> Optional[EffectiveMembership]:
        """Return the membership with the greatest index ``>= since_index`` in the log."""
        st = await self.get_log_state()

        end = log_next_index(st.last_log_id)
        start = max(log_next_index(st.last_purged_log_id), since_index)

        while start < end:
            entries = await self.try_get_log_entries(start, end)
            for ent in reversed(entries):
                if ent.membership is not None:
                    return EffectiveMembership(ent.log_id, ent.membership)
            end = max(end - _MEMBERSHIP_SCAN_STEP, 0)

        return None

    async def get_initial_state(self) -> InitialState:
        """Load the state a node starts from, cleaning up logs a snapshot covers."""
        vote = await self.read_vote()
        st = await self.get_log_state()
        last_log_id = st.last_log_id
        last_applied, _ = await self.last_applied_state()
        membership = await self.get_membership()

        # A snapshot was installed but the logs it covers were not cleaned.
        if _log_id_lt(last_log_id, last_applied):
            assert last_applied is not None
            await self.purge_logs_upto(last_applied)
            last_log_id = last_applied

        return InitialState(
            last_log_id=last_log_id,
            last_applied=last_applied,
            vote=vote if vote is not None else Vote(),
            last_membership=membership,
        )

    @abstractmethod
    async def save_vote(self, vote: Vote) -> None:
        """Persist the vote."""

    @abstractmethod
    async def read_vote(self) -> Optional[Vote]:
        """Return the persisted vote, if any."""

    @abstractmethod
    async def get_log_reader(self) -> RaftLogReader:
        """Return a log reader sharing this store's log."""

    @abstractmethod
    async def append_to_log(self, entries: Sequence[Entry]) -> None:
        """Append entries, each written at the position its index names."""

    @abstractmethod
    async def delete_conflict_logs_since(self, log_id: LogId) -> None:
        """Delete conflicting log entries since ``log_id``, inclusive."""

    @abstractmethod
    async def purge_logs_upto(self, log_id: LogId) -> None:
        """Delete applied log entries up to ``log_id``, inclusive."""

    @abstractmethod
    async def last_applied_state(
        self,
    ) -> Tuple[Optional[LogId], Optional[EffectiveMembership]]:
        """Return the last applied log id and the last applied membership."""

    @abstractmethod
    async def apply_to_state_machine(self, entries: Sequence[Entry]) -> List[R]:
        """Apply committed entries to the state machine and return their responses."""

    @abstractmethod
    async def get_snapshot_builder(self) -> RaftSnapshotBuilder:
        """Return a snapshot builder for the state machine."""

    @abstractmethod
    async def begin_receiving_snapshot(self) -> BinaryIO:
        """Return a new, writable handle to receive snapshot data into."""

    @abstractmethod
    async def install_snapshot(
        self, meta: SnapshotMeta, snapshot: BinaryIO
    ) -> StateMachineChanges:
        """Install a fully received snapshot, replacing every other snapshot."""

    @abstractmethod
    async def get_current_snapshot(self) -> Optional[Snapshot]:
        """Return the current snapshot with its metadata, if there is one."""