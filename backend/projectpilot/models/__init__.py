# ProjectPilot Models
from .stored_value import StoredValue

__all__ = [
    "StoredValue",
]
