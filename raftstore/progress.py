"""Tracking what a replication target holds, and building its AppendEntries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .events import Replicate, UpdateCommittedLogId, UpdateMatched
from .storage import Entry, RaftLogReader
from .types import LogId, Vote, add_index, log_index, log_next_index, next_index


def _opt_lt(a: Any, b: Any) -> bool:
    """Order optional values with ``None`` below every value."""
    if b is None:
        return False
    if a is None:
        return True
    return a < b


class LackEntry(Exception):
    """The entries a target needs have already been purged from the log."""

    def __init__(self, index: Optional[int], last_purged_log_id: Optional[LogId]) -> None:
        self.index = index
        self.last_purged_log_id = last_purged_log_id
        super().__init__(
            f"lack entry: index: {index}, last purged: {last_purged_log_id}"
        )


@dataclass
class AppendEntriesRequest:
    """An AppendEntries RPC from a leader to a target."""

    vote: Vote
    prev_log_id: Optional[LogId]
    leader_commit: Optional[LogId]
    entries: List[Entry] = field(default_factory=list)

    def summary(self) -> str:
        prev = "None" if self.prev_log_id is None else str(self.prev_log_id)
        commit = "None" if self.leader_commit is None else str(self.leader_commit)
        return (
            f"vote={self.vote}, prev_log_id={prev}, leader_commit={commit}, "
            f"n={len(self.entries)}"
        )


@dataclass
class ReplicationProgress:
    """The leader's view of how far a target's log matches its own.

    ``matched`` and ``max_possible_matched_index`` are the left and right
    cursors of a binary search for the last entry the target shares.
    """

    target: int
    vote: Vote
    committed: Optional[LogId] = None
    matched: Optional[LogId] = None
    max_possible_matched_index: Optional[int] = None
    need_to_replicate: bool = True

    def probe_prev_index(self) -> Optional[int]:
        """The index to probe next: the middle of the search window, aligned to 8."""
        diff = next_index(self.max_possible_matched_index) - log_next_index(self.matched)
        if diff < 0:
            raise ValueError(
                f"matched {self.matched} is beyond max possible matched index "
                f"{self.max_possible_matched_index}"
            )
        offset = diff // 16 * 8
        return add_index(log_index(self.matched), offset)

    def check_consecutive(self, last_purged: Optional[LogId]) -> None:
        """Raise LackEntry if the log no longer holds what the target may need."""
        if _opt_lt(self.max_possible_matched_index, log_index(last_purged)):
            raise LackEntry(self.max_possible_matched_index, last_purged)

    async def load_append_entries(
        self, log_reader: RaftLogReader, max_payload_entries: int
    ) -> Tuple[AppendEntriesRequest, Optional[LogId]]:
        """Build the next AppendEntries request from the log.

        Returns the request and the log id the target matches if it accepts it.
        """
        prev = self.probe_prev_index()

        while True:
            log_state = await log_reader.get_log_state()
            last_purged = log_state.last_purged_log_id
            self.check_consecutive(last_purged)

            purged_index = log_index(last_purged)
            if _opt_lt(prev, purged_index):
                prev = purged_index

            last_log_index = log_next_index(log_state.last_log_id)
            start = next_index(prev)
            end = min(start + max_payload_entries, last_log_index)
            if end < start:
                raise RuntimeError(
                    f"entries to send end at {end}, before start {start}"
                )

            if prev == purged_index:
                prev_log_id = last_purged
            elif prev is not None:
                first = await log_reader.try_get_log_entry(prev)
                if first is None:
                    # The entry was removed concurrently; reload the log state.
                    continue
                prev_log_id = first.log_id
            else:
                prev_log_id = None

            if start == end:
                logs: List[Entry] = []
            else:
                logs = await log_reader.try_get_log_entries(start, end)
                if logs and logs[0].log_id.index > log_next_index(prev_log_id):
                    # Entries were purged after prev_log_id was read; retry.
                    continue
            break

        self.need_to_replicate = end < last_log_index
        matched = logs[-1].log_id if logs else prev_log_id
        request = AppendEntriesRequest(
            vote=self.vote,
            prev_log_id=prev_log_id,
            leader_commit=self.committed,
            entries=logs,
        )
        return request, matched

    def update_matched(self, new_matched: Optional[LogId]) -> Optional[UpdateMatched]:
        """Advance the cursors after a success.

        Returns the event to report to the leader when ``matched`` grew.
        """
        new_index = log_index(new_matched)
        if _opt_lt(self.max_possible_matched_index, new_index):
            self.max_possible_matched_index = new_index

        if _opt_lt(self.matched, new_matched):
            self.matched = new_matched
            assert new_matched is not None
            return UpdateMatched(target=self.target, matched=new_matched)
        return None

    def handle_conflict(self, conflict: Optional[LogId]) -> None:
        """Shrink the search window after the target rejected ``conflict``."""
        if conflict is None:
            raise ValueError("prev_log_id=None never conflict")
        self.max_possible_matched_index = (
            None if conflict.index == 0 else conflict.index - 1
        )

    def needs_snapshot(self, threshold: int) -> bool:
        """Whether the target lags the committed log by ``threshold`` or more."""
        lag = log_next_index(self.committed) - log_next_index(self.matched)
        return max(lag, 0) >= threshold

    def process_raft_event(self, event: Any) -> None:
        """Take in a newly committed log id or a newly appended entry."""
        if isinstance(event, UpdateCommittedLogId):
            self.need_to_replicate = self.need_to_replicate or _opt_lt(
                self.committed, event.committed
            )
            self.committed = event.committed
        elif isinstance(event, Replicate):
            self.need_to_replicate = self.need_to_replicate or _opt_lt(
                self.committed, event.committed
            )
            self.committed = event.committed
            if _opt_lt(log_index(self.matched), event.appended.index):
                self.need_to_replicate = True
        else:
            raise TypeError(f"unknown raft event: {event!r}")

    def is_caught_up(self) -> bool:
        """Whether the search for the matching entry has converged."""
        return log_index(self.matched) == self.max_possible_matched_index