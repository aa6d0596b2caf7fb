"""Pytest fixtures for CodeReview unit tests."""

from datetime import timedelta

import pytest

from codereview.core import utcnow
from codereview.models import UserRole
from tests.utils import FakeEmailSender, make_container


@pytest.fixture
def sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def container(sender):
    """Container wired to in-memory fakes, fan-out subscribed."""
    return make_container(sender)


@pytest.fixture
def admin(container):
    return container.users.add_user("admin@example.com", UserRole.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture
def superadmin(container):
    return container.users.add_user("root@example.com", UserRole.SUPERADMIN, first_name="Sam", last_name="Super")


@pytest.fixture
def student(container):
    return container.users.add_user("alice@example.com", UserRole.STUDENT, first_name="Alice", last_name="Student")


@pytest.fixture
def other_student(container):
    return container.users.add_user("carol@example.com", UserRole.STUDENT, first_name="Carol", last_name="Student")


@pytest.fixture
def reviewer(container):
    return container.users.add_user("bob@example.com", UserRole.REVIEWER, first_name="Bob", last_name="Reviewer")


@pytest.fixture
def other_reviewer(container):
    return container.users.add_user("dave@example.com", UserRole.REVIEWER, first_name="Dave", last_name="Reviewer")


@pytest.fixture
def project(container, student):
    now = utcnow()
    return container.projects.add(
        title="Todo App",
        description="A small todo application",
        student=student.id,
        reviewers=[],
        submission_date=now,
        last_updated=now,
    )


@pytest.fixture
def cohort(container):
    now = utcnow()
    return container.cohorts.add(
        name="Spring Cohort",
        start_date=now - timedelta(days=30),
        end_date=now + timedelta(days=60),
        students=[],
        assigned_reviewers=[],
    )
