"""
Task state machine tests (service level).

Verifies:
- available -> taken -> completed, and taken -> available on return
- Only the owner completes or returns; nothing leaves completed
- Edit rights: creator or admin; delete rights: admin only
- Listing order, views and search
"""

import pytest

from tasklister.errors import ForbiddenError, NotFoundError, TaskUnavailableError, ValidationError
from tasklister.models import Task, TaskStatus
from tasklister.services import task_service


class TestCreateAndList:

    def test_create_is_available(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")

        assert task.status == TaskStatus.AVAILABLE
        assert task.created_by_id == alice.user_id
        assert task.created_by_name == "alice"
        assert task.created_at is not None
        assert task.owner_id is None and task.owner_name is None and task.taken_at is None

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_create_requires_text(self, acme, alice, text):
        with pytest.raises(ValidationError):
            task_service.create_task(acme.id, alice, text)

    def test_list_newest_first(self, acme, alice):
        first = task_service.create_task(acme.id, alice, "one")
        second = task_service.create_task(acme.id, alice, "two")
        third = task_service.create_task(acme.id, alice, "three")

        ids = [t.id for t in task_service.list_tasks(acme.id, alice)]
        assert ids == [third.id, second.id, first.id]

    def test_views(self, acme, alice, bob):
        available = task_service.create_task(acme.id, alice, "available")
        mine = task_service.create_task(acme.id, alice, "mine")
        theirs = task_service.create_task(acme.id, alice, "theirs")
        done = task_service.create_task(acme.id, alice, "done")

        task_service.take_task(acme.id, mine.id, alice)
        task_service.take_task(acme.id, theirs.id, bob)
        task_service.take_task(acme.id, done.id, alice)
        task_service.complete_task(acme.id, done.id, alice)

        def ids(view):
            return {t.id for t in task_service.list_tasks(acme.id, alice, view=view)}

        assert ids("all") == {available.id, mine.id, theirs.id, done.id}
        assert ids("active") == {available.id, mine.id, theirs.id}
        assert ids("mine") == {mine.id}
        assert ids("history") == {mine.id, theirs.id, done.id}

    def test_unknown_view(self, acme, alice):
        with pytest.raises(ValidationError):
            task_service.list_tasks(acme.id, alice, view="archived")

    def test_search_matches_text_creator_and_owner(self, acme, alice, bob):
        milk = task_service.create_task(acme.id, alice, "Buy MILK")
        bread = task_service.create_task(acme.id, bob, "Bake bread")
        printer = task_service.create_task(acme.id, alice, "Fix printer")
        task_service.take_task(acme.id, printer.id, bob)

        def ids(q):
            return {t.id for t in task_service.list_tasks(acme.id, alice, search=q)}

        assert ids("milk") == {milk.id}
        assert ids("BOB") == {bread.id, printer.id}
        assert ids("zzz") == set()

    def test_search_is_literal(self, acme, alice):
        task_service.create_task(acme.id, alice, "Buy milk")
        sale = task_service.create_task(acme.id, alice, "50% off")
        snake = task_service.create_task(acme.id, alice, "rename foo_bar")

        def texts(q):
            return [t.text for t in task_service.list_tasks(acme.id, alice, search=q)]

        assert texts("%") == [sale.text]
        assert texts("_") == [snake.text]
        assert texts("o_b") == [snake.text]

    def test_summary(self, acme, alice, bob):
        a = task_service.create_task(acme.id, alice, "a")
        b = task_service.create_task(acme.id, alice, "b")
        c = task_service.create_task(acme.id, alice, "c")
        task_service.create_task(acme.id, alice, "d")
        task_service.take_task(acme.id, a.id, alice)
        task_service.take_task(acme.id, b.id, bob)
        task_service.take_task(acme.id, c.id, alice)
        task_service.complete_task(acme.id, c.id, alice)

        summary = task_service.summarize_tasks(acme.id, alice)
        assert summary == {
            "available": 1,
            "taken": 2,
            "completed": 1,
            "total": 4,
            "mine": 1,
        }


class TestTransitions:

    def test_take_sets_owner(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        taken = task_service.take_task(acme.id, task.id, bob)

        assert taken.status == TaskStatus.TAKEN
        assert taken.owner_id == bob.user_id
        assert taken.owner_name == "bob"
        assert taken.taken_at is not None
        assert taken.completed_at is None

    def test_take_twice_rejected(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)

        with pytest.raises(TaskUnavailableError):
            task_service.take_task(acme.id, task.id, bob)

        fresh = task_service.get_task(acme.id, task.id)
        assert fresh.owner_name == "alice"

    def test_take_missing_task(self, acme, alice):
        with pytest.raises(TaskUnavailableError) as exc:
            task_service.take_task(acme.id, 99999, alice)
        assert isinstance(exc.value, NotFoundError)

    def test_complete_by_owner(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)
        done = task_service.complete_task(acme.id, task.id, alice)

        assert done.status == TaskStatus.COMPLETED
        assert done.completed_at is not None
        # Owner fields keep the completer
        assert done.owner_id == alice.user_id
        assert done.owner_name == "alice"

    def test_complete_by_non_owner_rejected(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)

        with pytest.raises(ForbiddenError):
            task_service.complete_task(acme.id, task.id, bob)

        assert task_service.get_task(acme.id, task.id).status == TaskStatus.TAKEN

    def test_admin_cannot_complete_someone_elses_task(self, acme, alice, acme_admin):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)

        with pytest.raises(ForbiddenError):
            task_service.complete_task(acme.id, task.id, acme_admin)

    def test_complete_available_rejected(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        with pytest.raises(ForbiddenError):
            task_service.complete_task(acme.id, task.id, alice)

    def test_return_clears_owner(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)
        returned = task_service.return_task(acme.id, task.id, alice)

        assert returned.status == TaskStatus.AVAILABLE
        assert returned.owner_id is None
        assert returned.owner_name is None
        assert returned.taken_at is None

    def test_return_available_rejected(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        with pytest.raises(ForbiddenError):
            task_service.return_task(acme.id, task.id, alice)

    def test_return_by_non_owner_rejected(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)
        with pytest.raises(ForbiddenError):
            task_service.return_task(acme.id, task.id, bob)

    def test_nothing_leaves_completed(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)
        task_service.complete_task(acme.id, task.id, alice)

        with pytest.raises(TaskUnavailableError):
            task_service.take_task(acme.id, task.id, bob)
        with pytest.raises(ForbiddenError):
            task_service.return_task(acme.id, task.id, alice)
        with pytest.raises(ForbiddenError):
            task_service.complete_task(acme.id, task.id, alice)

    def test_round_trip(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        listed = task_service.list_tasks(acme.id, alice)
        assert [(t.text, t.status, t.created_by_name) for t in listed] == [
            ("Buy milk", TaskStatus.AVAILABLE, "alice")
        ]

        taken = task_service.take_task(acme.id, task.id, bob)
        assert (taken.status, taken.owner_name) == (TaskStatus.TAKEN, "bob")

        returned = task_service.return_task(acme.id, task.id, bob)
        assert returned.status == TaskStatus.AVAILABLE
        assert (returned.owner_id, returned.owner_name, returned.taken_at) == (None, None, None)


class TestEditAndDelete:

    def test_creator_can_edit(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        edited = task_service.edit_task(acme.id, task.id, alice, "Buy oat milk")

        assert edited.text == "Buy oat milk"
        assert edited.edited_by_id == alice.user_id
        assert edited.edited_by_name == "alice"
        assert edited.edited_at is not None
        assert edited.status == TaskStatus.AVAILABLE

    def test_admin_can_edit_any(self, acme, alice, acme_admin):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        edited = task_service.edit_task(acme.id, task.id, acme_admin, "Buy cheese")
        assert edited.edited_by_name == "boss"

    def test_other_user_cannot_edit(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        with pytest.raises(ForbiddenError):
            task_service.edit_task(acme.id, task.id, bob, "Buy beer")
        assert task_service.get_task(acme.id, task.id).text == "Buy milk"

    def test_owner_who_is_not_creator_cannot_edit(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, bob)
        with pytest.raises(ForbiddenError):
            task_service.edit_task(acme.id, task.id, bob, "Buy beer")

    def test_edit_keeps_status(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)
        edited = task_service.edit_task(acme.id, task.id, alice, "Buy milk today")
        assert edited.status == TaskStatus.TAKEN
        assert edited.owner_name == "alice"

    def test_edit_validation_before_lookup(self, acme, alice):
        with pytest.raises(ValidationError):
            task_service.edit_task(acme.id, 99999, alice, " ")

    def test_edit_missing_task(self, acme, alice):
        with pytest.raises(NotFoundError):
            task_service.edit_task(acme.id, 99999, alice, "text")

    def test_edit_after_admin_delete(self, acme, alice, acme_admin):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_id = task.id
        task_service.delete_task(acme.id, task_id, acme_admin)

        with pytest.raises(NotFoundError):
            task_service.edit_task(acme.id, task_id, alice, "Buy oat milk")

    def test_rejected_edit_leaves_text(self, acme, alice, bob):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        with pytest.raises(ForbiddenError):
            task_service.edit_task(acme.id, task.id, bob, "Buy beer")
        assert task_service.get_task(acme.id, task.id).text == "Buy milk"

    def test_admin_deletes_any_status(self, acme, alice, acme_admin, db_session):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        task_service.take_task(acme.id, task.id, alice)
        task_id = task.id
        task_service.delete_task(acme.id, task_id, acme_admin)

        assert db_session.query(Task).filter_by(id=task_id).first() is None

    def test_user_cannot_delete(self, acme, alice):
        task = task_service.create_task(acme.id, alice, "Buy milk")
        with pytest.raises(ForbiddenError):
            task_service.delete_task(acme.id, task.id, alice)

    def test_delete_missing(self, acme, acme_admin):
        with pytest.raises(NotFoundError):
            task_service.delete_task(acme.id, 99999, acme_admin)
