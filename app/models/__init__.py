"""SQLAlchemy models package — import all models so Base.metadata is populated."""

from app.models.base import BaseModel, ModelMixin
from app.models.core import User
from app.models.esg import ESGResponse

__all__ = [
    "BaseModel",
    "ModelMixin",
    "User",
    "ESGResponse",
]
