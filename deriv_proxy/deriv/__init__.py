from .store import SessionStore
from .client import DerivClient
from .subscription import Subscription

__all__ = ["DerivClient", "SessionStore", "Subscription"]
