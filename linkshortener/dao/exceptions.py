"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    RecordNotFoundError:
        Base class for lookups that miss (short code, URL record, expired link).

    ShortCodeNotFoundError:
        Raised when a short code is not bound to any URL record.

    UrlRecordNotFoundError:
        Raised when a URL record does not exist in the data store.

    LinkExpiredError:
        Raised when a URL record exists but its expiry moment has passed.

    ShortCodeAlreadyExistsError:
        Raised when a short code is already bound to a different URL record.

    ShortCodeGenerationError:
        Raised when no free short code could be generated.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Example:
    >>> from linkshortener.dao.exceptions import ShortCodeAlreadyExistsError
    >>> raise ShortCodeAlreadyExistsError("Short code 'my-link' already exists.")
    Traceback (most recent call last):
        ...
    linkshortener.dao.exceptions.ShortCodeAlreadyExistsError: Short code 'my-link' already exists.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class RecordNotFoundError(DAOError):
    """Exception raised when a lookup misses in the data store."""

    pass


class ShortCodeNotFoundError(RecordNotFoundError):
    """Exception raised when a short code is not bound to any URL record."""

    pass


class UrlRecordNotFoundError(RecordNotFoundError):
    """Exception raised when a URL record is not found in the data store."""

    pass


class LinkExpiredError(RecordNotFoundError):
    """Exception raised when a URL record's expiry moment is in the past."""

    pass


class ShortCodeAlreadyExistsError(DAOError):
    """Exception raised when a short code is already bound to another URL record."""

    pass


class ShortCodeGenerationError(DAOError):
    """Exception raised when every generated short code candidate collided."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass
