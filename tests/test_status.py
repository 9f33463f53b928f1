from body_overlay.status import (
    ALL_TRACKED_TEXT, TrackingStatus, compute_tracking_status, presence_text,
)


def test_all_tracked():
    status = compute_tracking_status(["a", "b"], {"a": True, "b": True})
    assert status.all_tracked
    assert status.untracked == ()
    assert status.text == ALL_TRACKED_TEXT


def test_untracked_names_listed_once_in_order():
    joints = ["head", "neck", "left_hand", "neck", "right_hand"]
    tracked = {"head": True, "neck": False, "left_hand": True, "right_hand": False}

    status = compute_tracking_status(joints, tracked)

    assert not status.all_tracked
    assert status.untracked == ("neck", "right_hand")
    lines = status.text.splitlines()
    assert lines[0] == "Untracked joints:"
    assert lines[1:] == ["neck", "right_hand"]
    assert "head" not in status.text
    assert "left_hand" not in status.text


def test_unknown_joint_counts_as_untracked():
    status = compute_tracking_status(["a", "b"], {"a": True})
    assert status.untracked == ("b",)


def test_empty_joint_list_is_all_tracked():
    assert compute_tracking_status([], {}).all_tracked


def test_status_is_value():
    assert TrackingStatus(("x",)) == TrackingStatus(("x",))


def test_presence_text():
    assert presence_text(True) == "Body anchor presence: true"
    assert presence_text(False) == "Body anchor presence: false"
