"""Project store.

Each project is kept as one JSON document under the store root. Session files are excluded
by the model and therefore never written.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from authorflow.logging import get_logger
from authorflow.models.project import Project

logger = get_logger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class ProjectNotFoundError(KeyError):
    pass


@dataclass(frozen=True)
class ProjectStorePaths:
    """Filesystem layout for a project store."""

    root: Path

    def project_json(self, project_id: str) -> Path:
        if not _SAFE_ID_RE.match(project_id):
            raise ValueError(f"invalid project id: {project_id!r}")
        return self.root / f"{project_id}.json"


class ProjectStore:
    """JSON-file persistence for projects."""

    def __init__(self, root_dir: Path) -> None:
        self._paths = ProjectStorePaths(root=root_dir)
        self._paths.root.mkdir(parents=True, exist_ok=True)

    def save(self, project: Project) -> Path:
        """Write a project, replacing any previous version atomically.

        Each call writes its own temp file, so concurrent saves of one project never share one.
        """

        path = self._paths.project_json(project.id)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        tmp.write_text(project.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)
        logger.debug("Saved project %s to %s", project.id, path)
        return path

    def load(self, project_id: str) -> Project:
        """Load a project.

        Raises:
            ProjectNotFoundError: If no project with that id was saved.
        """

        path = self._paths.project_json(project_id)
        if not path.exists():
            raise ProjectNotFoundError(project_id)
        return Project.model_validate_json(path.read_text(encoding="utf-8"))

    def list_all(self) -> list[Project]:
        """All readable projects, oldest first."""

        projects: list[Project] = []
        for path in sorted(self._paths.root.glob("*.json")):
            try:
                projects.append(Project.model_validate_json(path.read_text(encoding="utf-8")))
            except ValidationError:
                logger.warning("Skipping unreadable project file %s", path)
        return sorted(projects, key=lambda p: p.created_at)

    def delete(self, project_id: str) -> None:
        path = self._paths.project_json(project_id)
        if not path.exists():
            raise ProjectNotFoundError(project_id)
        path.unlink()
