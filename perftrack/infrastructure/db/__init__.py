from . import models  # noqa: F401
from .base import Base
from .session import STORAGE_ERRORS, get_session, get_session_factory

__all__ = ["STORAGE_ERRORS", "Base", "get_session", "get_session_factory"]
