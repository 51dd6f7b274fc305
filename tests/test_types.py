import pytest

from raftstore.types import (
    LeaderId,
    LogId,
    SnapshotSegmentId,
    StateMachineChanges,
    Update,
    Vote,
    add_index,
    log_id_summary,
    log_index,
    log_next_index,
    next_index,
    prev_index,
)


def test_leader_id_ordering():
    l11 = LeaderId(1, 1)
    l12 = LeaderId(1, 2)
    l21 = LeaderId(2, 1)

    assert l11 < l12
    assert l12 < l21
    assert l12 == LeaderId(1, 2)


def test_leader_id_display():
    assert str(LeaderId(3, 7)) == "3-7"


def test_log_id_display_and_order():
    a = LogId.create(LeaderId(1, 0), 3)
    b = LogId.create(LeaderId(2, 0), 2)
    assert str(a) == "1-0-3"
    assert a < b
    assert LogId() == LogId(LeaderId(0, 0), 0)


def test_log_id_create_zero_is_allowed():
    assert LogId.create(LeaderId(0, 0), 0) == LogId()


@pytest.mark.parametrize(
    "leader_id, index",
    [(LeaderId(0, 0), 1), (LeaderId(1, 0), 0), (LeaderId(0, 2), 0)],
)
def test_log_id_create_rejects_bad_zeroth(leader_id, index):
    with pytest.raises(ValueError, match="zero-th log entry"):
        LogId.create(leader_id, index)


def test_log_id_summary():
    assert log_id_summary(None) == "None"
    assert log_id_summary(LogId(LeaderId(1, 0), 2)) == "1-0-2"


def test_log_index_helpers():
    assert log_index(None) is None
    assert log_index(LogId(LeaderId(1, 0), 5)) == 5
    assert log_next_index(None) == 0
    assert log_next_index(LogId(LeaderId(1, 0), 5)) == 6


def test_index_helpers():
    assert next_index(None) == 0
    assert next_index(3) == 4
    assert prev_index(0) is None
    assert prev_index(4) == 3
    with pytest.raises(ValueError):
        prev_index(None)


def test_add_index():
    assert add_index(None, 0) is None
    assert add_index(None, 1) == 0
    assert add_index(2, 3) == 5
    assert add_index(0, 0) == 0


def test_vote_behaviour():
    v = Vote(1, 0)
    assert v.committed is False
    assert v.leader() is None
    assert str(v) == "vote:1-0"
    assert v.leader_id() == LeaderId(1, 0)
    v.commit()
    assert v.committed is True
    assert v.leader() == 0
    assert Vote.committed_vote(2, 3) == Vote(2, 3, True)


def test_vote_ordering():
    assert Vote(1, 5) < Vote(2, 0)
    assert Vote(10, 9) < Vote(10, 10)
    assert Vote(1, 1) < Vote(1, 1, True)
    assert Vote() == Vote(0, 0, False)


def test_snapshot_segment_id():
    seg = SnapshotSegmentId.from_pair(("snap", 10))
    assert seg == SnapshotSegmentId("snap", 10)
    assert str(seg) == "snap+10"
    assert SnapshotSegmentId.from_pair((42, 0)).id == "42"


def test_update():
    assert Update.as_is().is_as_is()
    assert not Update(None).is_as_is()
    assert Update(5).value == 5
    assert Update.as_is() == Update.as_is()
    assert Update(1) != Update.as_is()


def test_state_machine_changes():
    c = StateMachineChanges(LogId(LeaderId(1, 0), 3), True)
    assert c.last_applied.index == 3
    assert c == StateMachineChanges(LogId(LeaderId(1, 0), 3), True)