"""Abstract base class for URL record data access objects (DAOs).

This class establishes a consistent contract for URL record storage,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, PostgreSQL).

Responsibilities:
    - Create, read, update and delete UrlRecordModel objects.
    - Keep the short code registry and per-owner index consistent with records.
    - Enforce ownership on mutating operations.

Example:
        >>> from linkshortener.dao.redis import UrlRecordRedisDAO
        >>> dao = UrlRecordRedisDAO(...)

        >>> url = dao.create('https://example.com/blog/article-123', 'my-link', owner_id='user-1')
        >>> dao.get_by_code('my-link').original_url
        'https://example.com/blog/article-123'

        >>> dao.update(url.id, 'user-1', UrlRecordPatch(title='My article'))
        >>> dao.delete(url.id, 'user-1')
"""

from abc import ABC, abstractmethod
from datetime import datetime

from linkshortener.models import UrlRecordModel, UrlRecordPatch


class UrlRecordBaseDAO(ABC):
    """Interface for URL record data access objects (DAOs).

    Methods:
        create(original_url, short_code, owner_id=None, title=None, description=None, expires_at=None) -> UrlRecordModel
            Persist a new record, bind its short code and index it under its owner.
            Raises ShortCodeAlreadyExistsError if the short code is already bound.

        get_by_id(record_id: str) -> UrlRecordModel
            Raises UrlRecordNotFoundError if the record does not exist.

        get_by_code(short_code: str) -> UrlRecordModel
            Raises ShortCodeNotFoundError / UrlRecordNotFoundError on a miss.

        list_by_owner(owner_id: str, limit: int | None = 50, offset: int = 0) -> list[UrlRecordModel]
            Owner's records, most recently created first.

        update(record_id: str, requester_id: str | None, patch: UrlRecordPatch) -> UrlRecordModel
            Raises UrlRecordNotFoundError, ForbiddenError or ShortCodeAlreadyExistsError.

        delete(record_id: str, requester_id: str | None = None) -> None
            Raises UrlRecordNotFoundError or ForbiddenError.

    All methods raise DataStoreError on connection or timeout failures.
    """

    @abstractmethod
    def create(
        self,
        original_url: str,
        short_code: str,
        owner_id: str | None = None,
        title: str | None = None,
        description: str | None = None,
        expires_at: datetime | None = None,
        **kwargs,
    ) -> UrlRecordModel:
        """Persist a new URL record.

        Raises:
            ShortCodeAlreadyExistsError:
                If the short code is already bound. No record is persisted.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_by_id(self, record_id: str, **kwargs) -> UrlRecordModel:
        pass

    @abstractmethod
    def get_by_code(self, short_code: str, **kwargs) -> UrlRecordModel:
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: str, limit: int | None = 50, offset: int = 0, **kwargs) -> list[UrlRecordModel]:
        """List an owner's records, most recently created first.

        Pagination is offset-based: concurrent inserts or deletes may shift
        page boundaries.
        """
        pass

    @abstractmethod
    def update(self, record_id: str, requester_id: str | None, patch: UrlRecordPatch, **kwargs) -> UrlRecordModel:
        """Apply a patch to a URL record.

        Raises:
            UrlRecordNotFoundError:
                If the record does not exist.

            ForbiddenError:
                If requester_id is given and is not the record's owner.

            ShortCodeAlreadyExistsError:
                If the patch changes the short code to one bound to another record.
                No partial state is written.
        """
        pass

    @abstractmethod
    def delete(self, record_id: str, requester_id: str | None = None, **kwargs) -> None:
        """Delete a URL record together with its code binding and owner index entry.

        Raises:
            UrlRecordNotFoundError:
                If the record does not exist.

            ForbiddenError:
                If requester_id is given and is not the record's owner.
        """
        pass
