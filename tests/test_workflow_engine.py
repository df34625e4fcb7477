"""Tests for the workflow engine."""

import pytest

from headless_cms.content.entries import EntryService
from headless_cms.db.models import WorkflowHistoryModel, WorkflowTransitionModel
from headless_cms.errors import InvalidTransitionError, NoPermissionError, NotFoundError
from headless_cms.workflow.engine import WorkflowEngine


@pytest.fixture
def entry(article_type, seeded, callers):
    return EntryService(seeded).create_entry(callers["editor"], article_type.id, {"title": "Hello"})


@pytest.fixture
def engine_(seeded):
    return WorkflowEngine(seeded)


class TestChangeStatus:
    """Tests for role-gated transitions."""

    def test_manager_cannot_approve_a_draft(self, engine_, entry, users):
        with pytest.raises(InvalidTransitionError) as exc_info:
            engine_.change_status(entry.id, users["manager"].id, "approved")
        assert exc_info.value.status_code == 409
        assert entry.status == "draft"
        assert engine_.get_history(entry.id) == []

    def test_full_path_to_published(self, engine_, entry, users):
        editor, manager = users["editor"].id, users["manager"].id

        engine_.request_review(entry.id, editor, "please review")
        engine_.change_status(entry.id, editor, "ready_for_approval")
        engine_.approve_entry(entry.id, manager)
        assert entry.published_at is None

        published = engine_.publish_entry(entry.id, manager, "ship it")
        assert published.status == "published"
        assert published.published_at is not None
        assert published.updated_by == manager

        history = engine_.get_history(entry.id)
        assert [(h.from_status, h.to_status) for h in history] == [
            ("draft", "in_review"),
            ("in_review", "ready_for_approval"),
            ("ready_for_approval", "approved"),
            ("approved", "published"),
        ]
        assert history[0].comment == "please review"
        assert history[-1].changed_by == manager

    def test_nothing_leaves_published(self, engine_, entry, users):
        admin = users["admin"].id
        for status in ("in_review", "ready_for_approval", "approved", "published"):
            engine_.change_status(entry.id, admin, status)
        for target in ("draft", "rejected", "in_review", "approved"):
            with pytest.raises(InvalidTransitionError):
                engine_.change_status(entry.id, admin, target)

    def test_reject_and_return_to_draft(self, engine_, entry, users):
        editor = users["editor"].id
        engine_.request_review(entry.id, editor)
        engine_.reject_entry(entry.id, editor, "needs work")
        assert engine_.change_status(entry.id, editor, "draft").status == "draft"

    def test_unknown_status(self, engine_, entry, users):
        with pytest.raises(InvalidTransitionError):
            engine_.change_status(entry.id, users["admin"].id, "archived")

    def test_rejected_transition_writes_no_history(self, engine_, entry, users, seeded):
        with pytest.raises(InvalidTransitionError):
            engine_.change_status(entry.id, users["viewer"].id, "in_review")
        assert seeded.query(WorkflowHistoryModel).count() == 0

    def test_request_review_requires_draft(self, engine_, entry, users):
        editor = users["editor"].id
        engine_.request_review(entry.id, editor)
        with pytest.raises(InvalidTransitionError):
            engine_.request_review(entry.id, editor)

    def test_unknown_user(self, engine_, entry):
        with pytest.raises(NotFoundError):
            engine_.change_status(entry.id, "nobody", "in_review")

    def test_user_without_role(self, engine_, entry, users, seeded):
        user = users["viewer"]
        user.role_id = None
        seeded.commit()
        with pytest.raises(NoPermissionError):
            engine_.change_status(entry.id, user.id, "in_review")

    def test_missing_entry(self, engine_, users):
        with pytest.raises(NotFoundError):
            engine_.change_status("missing", users["admin"].id, "in_review")

    def test_stored_table_is_used(self, engine_, entry, users, seeded):
        seeded.query(WorkflowTransitionModel).filter_by(
            from_status="draft", to_status="in_review", required_role="editor"
        ).delete()
        seeded.commit()
        with pytest.raises(InvalidTransitionError):
            engine_.request_review(entry.id, users["editor"].id)
        assert len(engine_.transition_table()) == 15


class TestComments:
    def test_private_comments_hidden_by_default(self, engine_, entry, users):
        editor = users["editor"].id
        engine_.add_comment(entry.id, editor, "public note")
        engine_.add_comment(entry.id, editor, "internal", is_private=True)

        assert [c.comment for c in engine_.get_comments(entry.id)] == ["public note"]
        assert [c.comment for c in engine_.get_comments(entry.id, include_private=True)] == [
            "public note",
            "internal",
        ]

    def test_comment_on_missing_entry(self, engine_, users):
        with pytest.raises(NotFoundError):
            engine_.add_comment("missing", users["editor"].id, "x")


class TestAssignments:
    def test_assign_and_complete(self, engine_, entry, users):
        manager, editor = users["manager"].id, users["editor"].id
        first = engine_.assign_entry(entry.id, manager, editor)
        second = engine_.assign_entry(entry.id, manager, editor)
        assert first.id != second.id
        assert {a.id for a in engine_.list_assignments(manager, "pending")} == {first.id, second.id}

        done = engine_.complete_assignment(first.id, completed_by=editor)
        assert done.status == "completed"
        assert done.completed_at is not None
        completed_at = done.completed_at

        again = engine_.complete_assignment(first.id)
        assert again.completed_at == completed_at
        assert [a.id for a in engine_.list_assignments(manager, "pending")] == [second.id]

    def test_assign_to_unknown_user(self, engine_, entry, users):
        with pytest.raises(NotFoundError):
            engine_.assign_entry(entry.id, "nobody", users["editor"].id)

    def test_complete_missing_assignment(self, engine_):
        with pytest.raises(NotFoundError):
            engine_.complete_assignment("missing")


class TestStatistics:
    def test_counts_every_status(self, engine_, article_type, seeded, callers, users):
        service = EntryService(seeded)
        first = service.create_entry(callers["editor"], article_type.id, {"title": "One"})
        service.create_entry(callers["editor"], article_type.id, {"title": "Two"})
        engine_.request_review(first.id, users["editor"].id)

        stats = engine_.statistics(article_type.id)
        assert stats == {
            "draft": 1,
            "in_review": 1,
            "ready_for_approval": 0,
            "approved": 0,
            "published": 0,
            "rejected": 0,
            "total": 2,
        }

    def test_unknown_content_type(self, engine_):
        with pytest.raises(NotFoundError):
            engine_.statistics("missing")
