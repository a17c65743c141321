from mindtest.models.base import Base
from mindtest.models.event import Event
from mindtest.models.result import Result

__all__ = [
    "Base",
    "Event",
    "Result",
]
