from .health import health
from .events import event

__all__ = [
    "health",
    "event",
]
