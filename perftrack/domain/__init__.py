from perftrack.domain.models import User

__all__ = ["User"]
