import os
from dataclasses import dataclass
from typing import List, Tuple

from starlette.concurrency import run_in_threadpool

from codereview.core import BadRequestError, NotFoundError, get_logger, utcnow
from codereview.core.context import AuthenticatedUser
from codereview.models import Project, ProjectFile
from codereview.repositories import CommentRepository, FileRepository, ProjectRepository

from .project_service import ProjectService
from .storage import PROJECT_FILES_PREFIX, StorageHandler, build_key

LANGUAGE_BY_EXTENSION = {
    ".js": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".py": "python",
    ".java": "java",
    ".rb": "ruby",
    ".php": "php",
    ".go": "go",
    ".c": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".json": "json",
    ".md": "markdown",
    ".sql": "sql",
    ".sh": "bash",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".xml": "xml",
    ".txt": "plaintext",
}


def detect_language(filename: str) -> str:
    return LANGUAGE_BY_EXTENSION.get(os.path.splitext(filename)[1].lower(), "plaintext")


def is_text_file(filename: str, content_type: str) -> bool:
    """Text MIME types and known source extensions keep their content inline."""
    return (content_type or "").startswith("text/") or os.path.splitext(filename)[1].lower() in LANGUAGE_BY_EXTENSION


@dataclass
class UploadedFile:
    """An upload already read and size-checked at the HTTP boundary."""

    filename: str
    content_type: str
    data: bytes


class FileService:
    def __init__(
        self,
        files: FileRepository,
        projects: ProjectRepository,
        comments: CommentRepository,
        project_service: ProjectService,
        storage: StorageHandler,
    ):
        self.files = files
        self.projects = projects
        self.comments = comments
        self.project_service = project_service
        self.storage = storage
        self.logger = get_logger("services.files")

    async def upload_files(
        self, project_id: str, uploads: List[UploadedFile], actor: AuthenticatedUser
    ) -> List[ProjectFile]:
        project = await self.project_service.get_project(project_id)
        self.project_service.ensure_can_edit(project, actor)
        if not uploads:
            raise BadRequestError("No files uploaded")

        created: List[ProjectFile] = []
        for upload in uploads:
            key = build_key(f"{PROJECT_FILES_PREFIX}/{project_id}", upload.filename)
            content_type = upload.content_type or "application/octet-stream"
            await run_in_threadpool(self.storage.put, upload.data, key, content_type)

            content = None
            if is_text_file(upload.filename, content_type):
                content = upload.data.decode("utf-8", errors="replace")

            file = await self.files.create(
                project=project_id,
                filename=upload.filename,
                path=key,
                content=content,
                file_type=content_type,
                language=detect_language(upload.filename),
                size=len(upload.data),
                uploaded_by=actor.id,
            )
            await self.projects.add_to_set(project_id, "files", file.id)
            created.append(file)

        await self.projects.update(project_id, {"last_updated": utcnow()})
        self.logger.info("files_uploaded", project_id=project_id, count=len(created))
        return created

    async def list_project_files(self, project_id: str, actor: AuthenticatedUser) -> List[ProjectFile]:
        await self.project_service.get_project_for(project_id, actor)
        return await self.files.list_by_project(project_id)

    async def get_file(self, file_id: str, actor: AuthenticatedUser) -> Tuple[ProjectFile, Project]:
        file = await self.files.get_by_id(file_id)
        if file is None:
            raise NotFoundError("File not found")
        project = await self.project_service.get_project_for(file.project, actor)
        return file, project

    async def read_raw(self, file_id: str, actor: AuthenticatedUser) -> Tuple[ProjectFile, bytes]:
        """Inline content when present, otherwise the stored object."""
        file, _ = await self.get_file(file_id, actor)
        if file.content is not None:
            return file, file.content.encode("utf-8")
        return file, await run_in_threadpool(self.storage.get, file.path)

    async def delete_file(self, file_id: str, actor: AuthenticatedUser) -> None:
        file, project = await self.get_file(file_id, actor)
        self.project_service.ensure_can_edit(project, actor)

        await run_in_threadpool(self.storage.delete, file.path)
        await self.comments.delete_by_file(file_id)
        await self.projects.pull(project.id, "files", file_id)
        await self.files.delete(file_id)
        self.logger.info("file_deleted", file_id=file_id, project_id=project.id)
