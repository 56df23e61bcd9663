"""Unit tests for the reminder batch: selection window, idempotence,
failure isolation, bounded concurrency and timeout."""

import threading
import time
from datetime import timedelta

import pytest

from app.config import Settings
from app.modules.profiles.service import ProfileLookup
from app.modules.reminders.dispatcher import ReminderDispatcher, run_reminder_batch
from app.modules.reminders.notifier import (
    InboxNotificationSender,
    LogNotificationSender,
    NotificationSender,
    build_sender,
)
from app.modules.reminders.schemas import TaskSummary
from tests.fakes import iso, make_profile, make_task


class RecordingSender(NotificationSender):
    def __init__(self, fail_for=(), raise_for=(), delay=0.0):
        self.fail_for = set(fail_for)
        self.raise_for = set(raise_for)
        self.delay = delay
        self.sent = []
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def send(self, recipient_email, summary):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if summary.task_id in self.raise_for:
                raise ConnectionError("smtp down")
            if summary.task_id in self.fail_for:
                return False
            with self._lock:
                self.sent.append((recipient_email, summary.task_id))
            return True
        finally:
            with self._lock:
                self.active -= 1


class FlagRacingSender(RecordingSender):
    """Flips the task flag during delivery, as an overlapping run would."""

    def __init__(self, db):
        super().__init__()
        self.db = db

    def send(self, recipient_email, summary):
        for row in self.db.rows("tasks"):
            if row["id"] == summary.task_id:
                row["reminder_sent"] = True
        return super().send(recipient_email, summary)


def due_task(task_id, now, hours=2, **fields):
    fields.setdefault("user_id", "owner")
    return make_task(task_id, due_date=iso(now + timedelta(hours=hours)), **fields)


@pytest.fixture
def seeded(db, now):
    db.seed("users", make_profile("owner", email="owner@example.com"))
    return db


def dispatcher(db, sender, **kwargs):
    return ReminderDispatcher(db, sender, ProfileLookup(db), **kwargs)


def reminder_flags(db):
    return {row["id"]: row["reminder_sent"] for row in db.rows("tasks")}


class TestSelection:
    def test_only_pending_tasks_inside_window(self, seeded, now):
        seeded.seed(
            "tasks",
            due_task("soon", now, hours=3),
            due_task("edge", now, hours=24),
            due_task("later", now, hours=30),
            due_task("past", now, hours=-1),
            due_task("done", now, hours=3, reminder_sent=True),
            make_task("undated", user_id="owner"),
        )

        result = dispatcher(seeded, RecordingSender()).run_once(now)

        assert result.success
        assert {t.id for t in result.succeeded} == {"soon", "edge"}
        assert result.processed == 2
        assert result.selected == 2

    def test_no_due_tasks(self, seeded, now):
        result = dispatcher(seeded, RecordingSender()).run_once(now)
        assert result.success
        assert result.processed == 0
        assert result.message == "No tasks due for reminders"


class TestIdempotence:
    def test_second_run_selects_nothing(self, seeded, now):
        seeded.seed("tasks", due_task("t1", now))
        sender = RecordingSender()

        first = dispatcher(seeded, sender).run_once(now)
        second = dispatcher(seeded, sender).run_once(now + timedelta(minutes=5))

        assert [t.id for t in first.succeeded] == ["t1"]
        assert second.selected == 0
        assert second.succeeded == []
        assert sender.sent == [("owner@example.com", "t1")]
        assert reminder_flags(seeded) == {"t1": True}


class TestFailureIsolation:
    def test_failed_send_stays_pending_others_flip(self, seeded, now):
        seeded.seed("tasks", due_task("ok1", now), due_task("bad", now), due_task("ok2", now))
        sender = RecordingSender(fail_for={"bad"})

        result = dispatcher(seeded, sender).run_once(now)

        assert result.success
        assert {t.id for t in result.succeeded} == {"ok1", "ok2"}
        assert [(f.task_id, f.stage) for f in result.failures] == [("bad", "notify")]
        assert reminder_flags(seeded) == {"ok1": True, "bad": False, "ok2": True}

    def test_sender_exception_is_contained(self, seeded, now):
        seeded.seed("tasks", due_task("boom", now), due_task("ok", now))
        result = dispatcher(seeded, RecordingSender(raise_for={"boom"})).run_once(now)
        assert [f.task_id for f in result.failures] == ["boom"]
        assert "smtp down" in result.failures[0].error
        assert reminder_flags(seeded) == {"boom": False, "ok": True}

    def test_missing_creator_profile(self, seeded, now):
        seeded.seed("tasks", due_task("orphan", now, user_id="ghost"))
        result = dispatcher(seeded, RecordingSender()).run_once(now)
        assert [(f.task_id, f.stage) for f in result.failures] == [("orphan", "lookup")]
        assert reminder_flags(seeded) == {"orphan": False}

    def test_profile_store_failure_is_per_task(self, db, now):
        db.seed("tasks", due_task("t1", now))
        db.fail("users")
        result = dispatcher(db, RecordingSender()).run_once(now)
        assert result.success
        assert result.failures[0].stage == "lookup"
        assert reminder_flags(db) == {"t1": False}

    def test_failed_task_retried_next_run(self, seeded, now):
        seeded.seed("tasks", due_task("t1", now))
        dispatcher(seeded, RecordingSender(fail_for={"t1"})).run_once(now)
        retry = dispatcher(seeded, RecordingSender()).run_once(now + timedelta(hours=1))
        assert [t.id for t in retry.succeeded] == ["t1"]

    def test_flip_failure_leaves_task_pending(self, seeded, now):
        seeded.seed("tasks", due_task("t1", now))
        seeded.fail("tasks", "update")
        result = dispatcher(seeded, RecordingSender()).run_once(now)
        assert [(f.task_id, f.stage) for f in result.failures] == [("t1", "mark")]
        assert reminder_flags(seeded) == {"t1": False}

    def test_malformed_row_fails_only_itself(self, seeded, now):
        seeded.seed("tasks", due_task("good", now), due_task("bad", now, hours=3, priority="critical"))

        result = dispatcher(seeded, RecordingSender()).run_once(now)

        assert result.success
        assert [t.id for t in result.succeeded] == ["good"]
        assert [(f.task_id, f.stage) for f in result.failures] == [("bad", "parse")]
        assert reminder_flags(seeded) == {"good": True, "bad": False}

    def test_row_without_title_is_a_parse_failure(self, seeded, now):
        seeded.seed("tasks", due_task("untitled", now, title=None))
        d = dispatcher(seeded, RecordingSender())
        result = d.run_once(now)
        assert result.failures[0].stage == "parse"
        assert d.in_flight() == set()

    def test_flag_flipped_by_another_run_is_not_a_failure(self, seeded, now):
        seeded.seed("tasks", due_task("t1", now))
        sender = FlagRacingSender(seeded)

        result = dispatcher(seeded, sender).run_once(now)

        assert result.failures == []
        assert result.succeeded == []
        assert result.already_marked == ["t1"]
        assert reminder_flags(seeded) == {"t1": True}


class TestStoreUnavailable:
    def test_select_failure_reported_not_raised(self, db, now):
        db.fail("tasks", "select")
        result = dispatcher(db, RecordingSender()).run_once(now)
        assert result.success is False
        assert result.error
        assert result.processed == 0

    def test_unconfigured_store(self, now):
        result = ReminderDispatcher(None, RecordingSender(), ProfileLookup(None)).run_once(now)
        assert result.success is False


class TestConcurrency:
    def test_worker_cap(self, seeded, now):
        seeded.seed("tasks", *[due_task(f"t{i}", now) for i in range(8)])
        sender = RecordingSender(delay=0.05)

        result = dispatcher(seeded, sender, max_workers=2).run_once(now)

        assert result.processed == 8
        assert sender.peak <= 2

    def test_claims_released_on_every_path(self, seeded, now):
        seeded.seed("tasks", due_task("ok", now), due_task("bad", now))
        d = dispatcher(seeded, RecordingSender(raise_for={"bad"}))
        d.run_once(now)
        assert d.in_flight() == set()

    def test_zero_timeout_launches_nothing(self, seeded, now):
        seeded.seed("tasks", due_task("t1", now), due_task("t2", now))
        sender = RecordingSender()

        result = dispatcher(seeded, sender, timeout_sec=0).run_once(now)

        assert result.timed_out
        assert sorted(result.skipped) == ["t1", "t2"]
        assert sender.sent == []
        assert reminder_flags(seeded) == {"t1": False, "t2": False}

    def test_timeout_lets_in_flight_work_finish(self, seeded, now):
        seeded.seed("tasks", *[due_task(f"t{i}", now) for i in range(4)])
        sender = RecordingSender(delay=0.3)

        result = dispatcher(seeded, sender, max_workers=1, timeout_sec=0.1).run_once(now)

        assert result.timed_out
        assert result.processed == 1
        assert len(result.skipped) == 3
        assert sum(reminder_flags(seeded).values()) == 1


class TestSenders:
    def test_incomplete_sender_cannot_be_built(self):
        class Silent(NotificationSender):
            pass

        with pytest.raises(TypeError):
            Silent()

    def test_build_sender(self, db):
        assert isinstance(build_sender("log", db), LogNotificationSender)
        assert isinstance(build_sender("inbox", db), InboxNotificationSender)
        with pytest.raises(ValueError):
            build_sender("pigeon", db)

    def test_inbox_sender_writes_notification(self, db, now):
        summary = TaskSummary(task_id="t1", title="Ship it", due_date=now, user_id="owner", team_id="team")
        assert InboxNotificationSender(db).send("owner@example.com", summary) is True
        row = db.rows("notifications")[0]
        assert row["user_id"] == "owner"
        assert row["related_task_id"] == "t1"
        assert "Ship it" in row["content"]

    def test_run_reminder_batch_uses_settings(self, seeded, now):
        seeded.seed("tasks", due_task("t1", now, hours=30))
        settings = Settings(reminder_window_hours=48, reminder_channel="inbox")

        result = run_reminder_batch(seeded, now, settings=settings)

        assert [t.id for t in result.succeeded] == ["t1"]
        assert seeded.count("notifications", "insert") == 1
