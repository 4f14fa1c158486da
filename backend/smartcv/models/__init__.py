from smartcv.models.user import User
from smartcv.models.cv import Cv

__all__ = ["User", "Cv"]
