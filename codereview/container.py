"""Wiring of repositories, collaborators and services for one application instance.

Every dependency is created lazily on first access. Any of them can be supplied to
the constructor instead, which is how tests swap in in-memory fakes.
"""

from typing import Optional

from codereview.events import EventBus
from codereview.repositories import (
    AssignmentRepository,
    CohortRepository,
    CommentRepository,
    FileRepository,
    NotificationRepository,
    ProjectRepository,
    UserRepository,
)
from codereview.services import (
    AssignmentService,
    AuthService,
    CohortService,
    CommentService,
    EmailSender,
    EmailService,
    FileService,
    NotificationFanout,
    NotificationService,
    ProjectService,
    StorageHandler,
    UserService,
    create_storage,
)


class Container:
    def __init__(
        self,
        *,
        users: Optional[UserRepository] = None,
        cohorts: Optional[CohortRepository] = None,
        projects: Optional[ProjectRepository] = None,
        files: Optional[FileRepository] = None,
        comments: Optional[CommentRepository] = None,
        assignments: Optional[AssignmentRepository] = None,
        notifications: Optional[NotificationRepository] = None,
        storage: Optional[StorageHandler] = None,
        email_sender: Optional[EmailSender] = None,
        bus: Optional[EventBus] = None,
    ):
        # Repositories
        self._users = users
        self._cohorts = cohorts
        self._projects = projects
        self._files = files
        self._comments = comments
        self._assignments = assignments
        self._notifications = notifications

        # Collaborators
        self._storage = storage
        self._email_sender = email_sender
        self._bus = bus
        self._email: Optional[EmailService] = None
        self._fanout: Optional[NotificationFanout] = None

        # Services
        self._auth_service: Optional[AuthService] = None
        self._user_service: Optional[UserService] = None
        self._cohort_service: Optional[CohortService] = None
        self._project_service: Optional[ProjectService] = None
        self._file_service: Optional[FileService] = None
        self._comment_service: Optional[CommentService] = None
        self._assignment_service: Optional[AssignmentService] = None
        self._notification_service: Optional[NotificationService] = None

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------

    @property
    def users(self) -> UserRepository:
        if self._users is None:
            self._users = UserRepository()
        return self._users

    @property
    def cohorts(self) -> CohortRepository:
        if self._cohorts is None:
            self._cohorts = CohortRepository()
        return self._cohorts

    @property
    def projects(self) -> ProjectRepository:
        if self._projects is None:
            self._projects = ProjectRepository()
        return self._projects

    @property
    def files(self) -> FileRepository:
        if self._files is None:
            self._files = FileRepository()
        return self._files

    @property
    def comments(self) -> CommentRepository:
        if self._comments is None:
            self._comments = CommentRepository()
        return self._comments

    @property
    def assignments(self) -> AssignmentRepository:
        if self._assignments is None:
            self._assignments = AssignmentRepository()
        return self._assignments

    @property
    def notifications(self) -> NotificationRepository:
        if self._notifications is None:
            self._notifications = NotificationRepository()
        return self._notifications

    # -------------------------------------------------------------------------
    # Collaborators
    # -------------------------------------------------------------------------

    @property
    def storage(self) -> StorageHandler:
        if self._storage is None:
            self._storage = create_storage()
        return self._storage

    @property
    def email(self) -> EmailService:
        if self._email is None:
            self._email = EmailService(sender=self._email_sender)
        return self._email

    @property
    def bus(self) -> EventBus:
        """The event bus, with the notification fan-out subscribed exactly once."""
        if self._bus is None:
            self._bus = EventBus()
        if self._fanout is None:
            self._fanout = NotificationFanout(self.notification_service, self.users, self.cohorts, self.projects)
            self._fanout.register(self._bus)
        return self._bus

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(self.users, self.cohorts, self.email)
        return self._auth_service

    @property
    def user_service(self) -> UserService:
        if self._user_service is None:
            self._user_service = UserService(self.users, self.cohorts, self.projects, self.storage)
        return self._user_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService(self.notifications, self.users, self.email)
        return self._notification_service

    @property
    def assignment_service(self) -> AssignmentService:
        if self._assignment_service is None:
            self._assignment_service = AssignmentService(
                self.assignments, self.users, self.cohorts, self.projects, self.bus
            )
        return self._assignment_service

    @property
    def cohort_service(self) -> CohortService:
        if self._cohort_service is None:
            self._cohort_service = CohortService(self.cohorts, self.users, self.assignment_service)
        return self._cohort_service

    @property
    def project_service(self) -> ProjectService:
        if self._project_service is None:
            self._project_service = ProjectService(
                self.projects,
                self.users,
                self.cohorts,
                self.files,
                self.comments,
                self.storage,
                self.assignment_service,
                self.bus,
            )
        return self._project_service

    @property
    def file_service(self) -> FileService:
        if self._file_service is None:
            self._file_service = FileService(
                self.files, self.projects, self.comments, self.project_service, self.storage
            )
        return self._file_service

    @property
    def comment_service(self) -> CommentService:
        if self._comment_service is None:
            self._comment_service = CommentService(self.comments, self.files, self.project_service, self.bus)
        return self._comment_service
