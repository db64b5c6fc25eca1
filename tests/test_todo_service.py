import threading
from datetime import datetime, timedelta, timezone

import pytest

from todo_reminders.errors import NotFoundError, ValidationError
from todo_reminders.models import TodoStatus
from todo_reminders.scheduler import RecurringScheduler
from todo_reminders.services import DEFAULT_DESCRIPTION, TodoService
from todo_reminders.stores import InMemoryTodoStore, InMemoryUserStore


@pytest.fixture
def service():
    return TodoService(InMemoryTodoStore(), InMemoryUserStore())


@pytest.fixture
def alice(service):
    return service.create_user({"name": "Alice", "email": "a@x.com"})


@pytest.fixture
def bob(service):
    return service.create_user({"name": "Bob", "email": "b@x.com"})


def now_utc():
    return datetime.now(timezone.utc)


class TestUsers:
    def test_create_user_gets_fresh_ids(self, service):
        ids = [service.create_user({"name": f"U{i}", "email": f"u{i}@x.com"})["id"] for i in range(5)]
        assert len(set(ids)) == 5

    def test_find_user_by_id_and_all(self, service, alice, bob):
        assert service.find_user_by_id(alice["id"]) == alice
        assert service.find_user_by_id("user-404") is None
        assert [u["id"] for u in service.find_user_all()] == [alice["id"], bob["id"]]

    def test_create_user_invalid_email(self, service):
        with pytest.raises(ValidationError):
            service.create_user({"name": "Eve", "email": "eve"})


class TestCreateTodo:
    def test_creates_pending_todo_with_default_description(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})

        assert todo["user_id"] == alice["id"]
        assert todo["status"] == TodoStatus.PENDING
        assert todo["description"] == DEFAULT_DESCRIPTION
        assert todo["remind_at"] is None

    def test_keeps_given_description(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent", "description": "Landlord"})
        assert todo["description"] == "Landlord"

    def test_parses_remind_at_string(self, service, alice):
        todo = service.create_todo(
            {"user_id": alice["id"], "title": "Dentist", "remind_at": "2031-03-04T10:00:00+02:00"}
        )
        assert todo["remind_at"] == datetime(2031, 3, 4, 8, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "remind_at, expected",
        [
            ("20250131T134500Z", datetime(2025, 1, 31, 13, 45, tzinfo=timezone.utc)),
            ("2025-01-31T13:45:00.12Z", datetime(2025, 1, 31, 13, 45, 0, 120000, tzinfo=timezone.utc)),
            ("2025-01-31", datetime(2025, 1, 31, tzinfo=timezone.utc)),
        ],
    )
    def test_accepts_iso8601_forms(self, service, alice, remind_at, expected):
        todo = service.create_todo({"user_id": alice["id"], "title": "Dentist", "remind_at": remind_at})
        assert todo["remind_at"] == expected

    def test_unknown_user_fails_without_mutation(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.create_todo({"user_id": "user-404", "title": "Orphan"})

        assert exc_info.value.entity == "user"
        assert exc_info.value.kind == "not_found"
        assert service.get_todos_by_user("user-404") == []

    def test_blank_title_is_a_validation_error(self, service, alice):
        with pytest.raises(ValidationError):
            service.create_todo({"user_id": alice["id"], "title": "   "})
        assert service.get_todos_by_user(alice["id"]) == []

    def test_bad_remind_at_is_a_validation_error(self, service, alice):
        with pytest.raises(ValidationError):
            service.create_todo({"user_id": alice["id"], "title": "Dentist", "remind_at": "next tuesday"})

    def test_missing_user_id_is_a_validation_error(self, service):
        with pytest.raises(ValidationError):
            service.create_todo({"title": "Nobody's"})


class TestCompleteTodo:
    def test_marks_done(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        done = service.complete_todo(todo["id"])
        assert done["status"] == TodoStatus.DONE
        assert done["updated_at"] >= todo["updated_at"]

    def test_is_idempotent(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        first = service.complete_todo(todo["id"])
        second = service.complete_todo(todo["id"])

        assert second == first
        assert service.find_todo_by_id(todo["id"])["updated_at"] == first["updated_at"]

    def test_unknown_todo(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.complete_todo("todo-missing")
        assert exc_info.value.entity == "todo"

    def test_deleted_todo_cannot_be_completed(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        service.delete_todo(todo["id"])
        with pytest.raises(NotFoundError):
            service.complete_todo(todo["id"])


class TestProcessReminders:
    def test_due_todo_becomes_reminder_due(self, service, alice):
        now = now_utc()
        todo = service.create_todo(
            {"user_id": alice["id"], "title": "Pay rent", "remind_at": now - timedelta(hours=1)}
        )

        assert service.process_reminders(now) == 1
        assert service.find_todo_by_id(todo["id"])["status"] == TodoStatus.REMINDER_DUE

    def test_sweep_is_idempotent(self, service, alice):
        now = now_utc()
        todo = service.create_todo(
            {"user_id": alice["id"], "title": "Pay rent", "remind_at": now - timedelta(minutes=1)}
        )
        service.process_reminders(now)
        after_first = service.find_todo_by_id(todo["id"])

        assert service.process_reminders(now) == 0
        assert service.find_todo_by_id(todo["id"]) == after_first

    def test_skips_future_done_and_deleted(self, service, alice):
        now = now_utc()
        past = now - timedelta(minutes=1)
        future = service.create_todo({"user_id": alice["id"], "title": "Later", "remind_at": now + timedelta(days=1)})
        done = service.create_todo({"user_id": alice["id"], "title": "Done", "remind_at": past})
        service.complete_todo(done["id"])
        deleted = service.create_todo({"user_id": alice["id"], "title": "Deleted", "remind_at": past})
        service.delete_todo(deleted["id"])

        assert service.process_reminders(now) == 0
        assert service.find_todo_by_id(future["id"])["status"] == TodoStatus.PENDING
        assert service.find_todo_by_id(done["id"])["status"] == TodoStatus.DONE

    def test_defaults_to_current_time(self, service, alice):
        todo = service.create_todo(
            {"user_id": alice["id"], "title": "Pay rent", "remind_at": now_utc() - timedelta(seconds=1)}
        )
        assert service.process_reminders() == 1
        assert service.find_todo_by_id(todo["id"])["status"] == TodoStatus.REMINDER_DUE

    def test_completion_after_snapshot_is_not_overwritten(self, service, alice, monkeypatch):
        now = now_utc()
        todo = service.create_todo(
            {"user_id": alice["id"], "title": "Pay rent", "remind_at": now - timedelta(minutes=1)}
        )
        store = service._todos
        snapshot = store.find_due_reminders

        def completed_after_snapshot(at):
            due = snapshot(at)
            # a request completes the todo between the sweep's read and write
            service.complete_todo(todo["id"])
            return due

        monkeypatch.setattr(store, "find_due_reminders", completed_after_snapshot)

        assert service.process_reminders(now) == 0
        assert service.find_todo_by_id(todo["id"])["status"] == TodoStatus.DONE

    def test_runs_from_the_scheduler(self, service, alice):
        todo = service.create_todo(
            {"user_id": alice["id"], "title": "Pay rent", "remind_at": now_utc() - timedelta(hours=1)}
        )
        scheduler = RecurringScheduler()
        swept = threading.Event()

        def sweep():
            service.process_reminders()
            swept.set()

        scheduler.schedule_recurring("reminder-check", 0.01, sweep)
        try:
            assert swept.wait(5.0)
        finally:
            scheduler.stop("reminder-check")

        assert service.find_todo_by_id(todo["id"])["status"] == TodoStatus.REMINDER_DUE


class TestShare:
    def test_share_creates_independent_copy(self, service, alice, bob):
        source = service.create_todo(
            {
                "user_id": alice["id"],
                "title": "Pay rent",
                "description": "Before the 1st",
                "remind_at": now_utc() + timedelta(days=2),
            }
        )

        shared = service.share({"id": source["id"], "user_id_target": bob["id"]})

        assert shared["id"] != source["id"]
        assert shared["user_id"] == bob["id"]
        for field in ("title", "description", "status", "remind_at"):
            assert shared[field] == source[field]

        service.update_todo(shared["id"], {"title": "Pay Alice's rent"})
        service.complete_todo(shared["id"])

        assert service.get_todos_by_user(alice["id"]) == [source]
        assert [t["id"] for t in service.get_todos_by_user(bob["id"])] == [shared["id"]]

    def test_share_copies_current_status(self, service, alice, bob):
        source = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        service.complete_todo(source["id"])

        shared = service.share({"id": source["id"], "user_id_target": bob["id"]})
        assert shared["status"] == TodoStatus.DONE

    def test_share_unknown_todo(self, service, bob):
        with pytest.raises(NotFoundError) as exc_info:
            service.share({"id": "todo-missing", "user_id_target": bob["id"]})
        assert exc_info.value.entity == "todo"

    def test_share_unknown_target_user(self, service, alice):
        source = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        with pytest.raises(NotFoundError) as exc_info:
            service.share({"id": source["id"], "user_id_target": "user-404"})
        assert exc_info.value.entity == "user"
        assert service.get_todos_by_user("user-404") == []

    def test_share_deleted_todo(self, service, alice, bob):
        source = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        service.delete_todo(source["id"])
        with pytest.raises(NotFoundError):
            service.share({"id": source["id"], "user_id_target": bob["id"]})


class TestPassThroughs:
    def test_update_todo(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})
        updated = service.update_todo(todo["id"], {"description": "Via bank"})
        assert updated["description"] == "Via bank"
        assert service.update_todo("todo-missing", {"title": "x"}) is None

    def test_delete_todo_is_soft(self, service, alice):
        todo = service.create_todo({"user_id": alice["id"], "title": "Pay rent"})

        deleted = service.delete_todo(todo["id"])
        assert deleted["deleted"] is True
        assert deleted["id"] == todo["id"]
        assert service.find_todo_by_id(todo["id"]) is None
        assert service.get_todos_by_user(alice["id"]) == []
        assert service.delete_todo(todo["id"]) is None

    def test_concurrent_creates_get_unique_ids(self, service, alice):
        ids = []
        lock = threading.Lock()

        def worker():
            for i in range(50):
                todo = service.create_todo({"user_id": alice["id"], "title": f"Task {i}"})
                with lock:
                    ids.append(todo["id"])

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 200
        assert len(set(ids)) == 200
