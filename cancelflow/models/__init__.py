from .base import Base
from .subscription import Subscription
from .cancellation import Cancellation

__all__ = ["Base", "Subscription", "Cancellation"]
