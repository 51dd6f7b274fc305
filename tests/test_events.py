import pytest

from raftstore.events import (
    NeedsSnapshot,
    ReplicaShutdown,
    Replicate,
    ReplicationMetrics,
    RevertToFollower,
    TargetReplState,
    UpdateCommittedLogId,
    UpdateMatched,
)
from raftstore.types import LeaderId, LogId, Vote


def lid(term, index, node=0):
    return LogId(LeaderId(term, node), index)


def test_metrics_default_matched():
    assert ReplicationMetrics().matched() == LogId()


def test_metrics_matched_and_summary():
    m = ReplicationMetrics(LeaderId(1, 2), 3)
    assert m.matched() == LogId(LeaderId(1, 2), 3)
    assert m.summary() == str(m.matched())
    assert m.summary() == "1-2-3"


def test_metrics_equality_and_mutation():
    a = ReplicationMetrics(LeaderId(1, 0), 5)
    b = ReplicationMetrics(LeaderId(1, 0), 5)
    assert a == b
    b.matched_index = 6
    assert a != b
    assert b.matched().index == 6


def test_repl_state_constants():
    assert TargetReplState.LINE_RATE == TargetReplState("line_rate")
    assert TargetReplState.SHUTDOWN.kind == "shutdown"
    s = TargetReplState("snapshotting", lid(1, 4))
    assert s.must_include == lid(1, 4)
    assert TargetReplState("snapshotting").must_include is None


def test_repl_state_rejects_bad_input():
    with pytest.raises(ValueError):
        TargetReplState("bogus")
    with pytest.raises(ValueError):
        TargetReplState("line_rate", lid(1, 1))


def test_replicate_summary():
    s = Replicate(appended=lid(1, 3), committed=None).summary()
    assert s.startswith("Replicate: appended: ")
    assert repr(lid(1, 3)) in s
    assert s.endswith("committed: None")


def test_update_committed_summary():
    assert UpdateCommittedLogId(None).summary() == (
        "UpdateCommitIndex: commit_index: None"
    )
    s = UpdateCommittedLogId(lid(2, 7)).summary()
    assert s.startswith("UpdateCommitIndex: commit_index: Some(")
    assert repr(lid(2, 7)) in s


def test_update_matched_summary():
    s = UpdateMatched(target=3, matched=lid(1, 5)).summary()
    assert s.startswith("UpdateMatchIndex: target: 3, matched: ")
    assert s.endswith(repr(lid(1, 5)))


def test_revert_to_follower_summary():
    s = RevertToFollower(target=2, vote=Vote(5, 2)).summary()
    assert s == "RevertToFollower: target: 2, vote: vote:5-2"


def test_needs_snapshot_summary_and_equality():
    a = NeedsSnapshot(target=4, must_include=None, tx=object())
    assert a.summary() == "NeedsSnapshot: target: 4, must_include: None"
    assert a == NeedsSnapshot(target=4, must_include=None, tx=object())
    s = NeedsSnapshot(target=4, must_include=lid(1, 1)).summary()
    assert "must_include: Some(" in s


def test_shutdown_summary():
    assert ReplicaShutdown().summary() == "Shutdown"