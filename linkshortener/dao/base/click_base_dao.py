"""Abstract base class for click tracking data access objects (DAOs).

Responsibilities:
    - Count visits atomically per URL record (lifetime counter).
    - Count visits per URL record and calendar day, with a rolling retention window.
    - Provide zero-filled daily series for analytics.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from linkshortener.models import DailyCount


class ClickBaseDAO(ABC):
    """Interface for click tracking data access objects (DAOs).

    Methods:
        record_visit(record_id: str) -> int:
            Count one visit. Returns the new lifetime counter value.
            Raises UrlRecordNotFoundError if the record does not exist.

        get_daily_counts(record_id: str, days: int = 30) -> list[DailyCount]:
            Exactly `days` entries, oldest first, ending today, zero-filled.

        get_daily_counts_many(record_ids: Iterable[str], days: int = 30) -> dict[str, list[DailyCount]]:
            Same as get_daily_counts() for several records at once.

    All methods raise DataStoreError on connection or timeout failures.
    """

    @abstractmethod
    def record_visit(self, record_id: str, **kwargs) -> int:
        pass

    @abstractmethod
    def get_daily_counts(self, record_id: str, days: int = 30, **kwargs) -> list[DailyCount]:
        pass

    @abstractmethod
    def get_daily_counts_many(self, record_ids: Iterable[str], days: int = 30, **kwargs) -> dict[str, list[DailyCount]]:
        pass
