"""Projects owned by a user and optionally shared with a team."""

from .models import Project
from .schemas import ProjectCreate, ProjectUpdate
from .service import ProjectService

__all__ = ["Project", "ProjectCreate", "ProjectUpdate", "ProjectService"]
