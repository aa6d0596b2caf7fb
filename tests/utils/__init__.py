"""Shared test doubles for the CodeReview test suite."""

from tests.utils.fakes import (
    FakeAssignmentRepository,
    FakeCohortRepository,
    FakeCommentRepository,
    FakeEmailSender,
    FakeFileRepository,
    FakeNotificationRepository,
    FakeProjectRepository,
    FakeStorage,
    FakeUserRepository,
    as_actor,
    make_container,
)

__all__ = [
    "FakeUserRepository",
    "FakeCohortRepository",
    "FakeProjectRepository",
    "FakeFileRepository",
    "FakeCommentRepository",
    "FakeAssignmentRepository",
    "FakeNotificationRepository",
    "FakeStorage",
    "FakeEmailSender",
    "make_container",
    "as_actor",
]
