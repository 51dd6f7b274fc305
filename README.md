# raftstore

Building blocks for the storage and replication side of a Raft node,
written with asyncio. The package has no dependencies outside the
standard library.

## Modules

- `raftstore.types` holds the value types. `LeaderId` and `LogId` are
  ordered. `LogId.create` refuses a zero-th entry that is not
  `(0, 0, 0)`. `Vote` has `commit`, `leader_id` and `leader`, and
  `Vote.committed_vote` builds a committed one. The module also defines
  `SnapshotSegmentId` (with `from_pair`), `Update` (with `as_is` and
  `is_as_is`) and `StateMachineChanges`. Helpers for optional log ids
  and indexes are `log_id_summary`, `log_index`, `log_next_index`,
  `next_index`, `prev_index` and `add_index`. `prev_index(None)` raises
  `ValueError`.
- `raftstore.storage` holds the async storage interface.
  - `RaftLogReader`, `RaftSnapshotBuilder` and `RaftStorage` are
    abstract base classes.
  - Some methods come with a working default: `try_get_log_entry`,
    `get_membership`, `last_membership_in_log` and `get_initial_state`.
    `get_initial_state` purges logs that the state machine already
    covers.
  - Data types: `Entry`, `EffectiveMembership`, `SnapshotMeta`,
    `Snapshot`, `InitialState` and `LogState`.
  - An `Entry` with a `membership` value is a membership entry.
  - `try_get_log_entries(start, stop)` reads the half-open range
    `[start, stop)`. `stop=None` means no upper bound.
- `raftstore.events` holds the events that pass between a leader and a
  replication stream: `Replicate`, `UpdateCommittedLogId`,
  `UpdateMatched`, `RevertToFollower`, `NeedsSnapshot` and
  `ReplicaShutdown`. Each has a `summary()`. The module also defines
  `ReplicationMetrics` and `TargetReplState`, whose states are
  `line_rate`, `snapshotting` and `shutdown`.
- `raftstore.progress` follows what one target has matched.
  - `ReplicationProgress` keeps two cursors, `matched` and
    `max_possible_matched_index`. It narrows them by bisection with
    `probe_prev_index`, `update_matched` and `handle_conflict`.
  - `load_append_entries(log_reader, max_payload_entries)` builds an
    `AppendEntriesRequest`. It returns that request together with the
    log id the target will match once it accepts the request.
  - `check_consecutive` raises `LackEntry` when the entries the target
    needs have been purged.
  - The remaining methods are `needs_snapshot(threshold)`,
    `process_raft_event` and `is_caught_up`.

## Example

```python
from raftstore.types import LeaderId, LogId, Vote, log_next_index

log_id = LogId.create(LeaderId(1, 0), 5)
print(log_id)                   # 1-0-5
print(log_next_index(log_id))   # 6
print(log_next_index(None))     # 0

vote = Vote(3, 2)
print(vote.leader())            # None
vote.commit()
print(vote.leader())            # 2
```

To plug in a store, subclass `RaftStorage` and implement its abstract
coroutines. The default methods then work on top of them.

## What it does not do

- It ships no concrete store: neither in memory nor on disk.
- It has no store wrapper that checks input for errors.
- It defines no storage error types. Errors raised by your store pass
  through unchanged.
- It does not run a replication loop, send RPCs over a network or
  stream snapshots. `ReplicationProgress` only computes what to send
  next and takes in the results.
- It has no command-line program.

## Tests

```
pip install .[test]
pytest
```