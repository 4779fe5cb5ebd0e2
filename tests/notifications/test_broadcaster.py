from __future__ import annotations

from school_attendance.attendance.service import AttendanceService
from school_attendance.core.enums import AttendanceStatus as S, Role
from school_attendance.notifications.broadcaster import AttendanceBroadcaster
from school_attendance.notifications.notifier import student_topic


def test_subscriber_receives_messages_for_its_topic_only():
    hub = AttendanceBroadcaster(queue_size=5)
    mine = hub.subscribe(student_topic("STU001"))
    other = hub.subscribe(student_topic("STU002"))

    hub.notify(student_topic("STU001"), {"n": 1})

    assert mine.get(timeout=0.1) == {"n": 1}
    assert other.get(timeout=0.01) is None


def test_every_listener_gets_a_copy():
    hub = AttendanceBroadcaster()
    a = hub.subscribe("student:STU001")
    b = hub.subscribe("student:STU001")

    hub.notify("student:STU001", {"n": 1})

    assert a.get(timeout=0.1) == {"n": 1}
    assert b.get(timeout=0.1) == {"n": 1}


def test_full_mailbox_drops_instead_of_blocking():
    hub = AttendanceBroadcaster(queue_size=1)
    sub = hub.subscribe("student:STU001")

    hub.notify("student:STU001", {"n": 1})
    hub.notify("student:STU001", {"n": 2})

    assert sub.get(timeout=0.1) == {"n": 1}
    assert sub.get(timeout=0.01) is None


def test_close_unsubscribes():
    hub = AttendanceBroadcaster()
    sub = hub.subscribe("student:STU001")
    assert hub.listener_count("student:STU001") == 1

    sub.close()
    sub.close()

    assert hub.listener_count("student:STU001") == 0
    assert list(sub.messages(timeout=0.01)) == []


def test_publish_without_listeners_is_fine():
    AttendanceBroadcaster().notify("student:nobody", {"n": 1})


def test_attendance_service_pushes_updates_to_listeners(logs, directory_service, fixed_now):
    hub = AttendanceBroadcaster()
    service = AttendanceService(logs, directory_service, notifier=hub)
    sub = hub.subscribe(student_topic("STU001"))

    log = service.mark_attendance("SCH001", Role.SCHOOL, "STU001", S.IN, now=fixed_now)

    message = sub.get(timeout=0.1)
    assert message["type"] == "ATTENDANCE_UPDATE"
    assert message["studentId"] == "STU001"
    assert message["log"]["log_id"] == log.log_id
    assert message["log"]["status"] == "IN"
