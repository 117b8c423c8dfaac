from .base import Base, TimestampedUUIDModel, UUIDModel  # noqa: F401


def load_models():
    """Import every model module so all tables are registered on ``Base.metadata``."""
    from promptspace.teams import models as _teams  # noqa: F401
    from promptspace.categories import models as _categories  # noqa: F401
    from promptspace.projects import models as _projects  # noqa: F401
    from promptspace.prompts import models as _prompts  # noqa: F401

    return Base.metadata
