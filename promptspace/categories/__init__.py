"""Personal, team and public prompt categories."""

from .models import Category
from .schemas import CategoryCreate, CategoryUpdate
from .service import CategoryService

__all__ = ["Category", "CategoryCreate", "CategoryUpdate", "CategoryService"]
