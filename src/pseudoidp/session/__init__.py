from .database import SessionStore
from .info import RequestInput
from .info import Session

__all__ = ["RequestInput", "Session", "SessionStore"]
