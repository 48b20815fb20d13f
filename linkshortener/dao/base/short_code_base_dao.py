"""Abstract base class for short code registry data access objects (DAOs).

The registry owns the bijection between short codes and URL record ids. Codes
are looked up on every redirect and written only on create/update, so
implementations must offer a direct code -> id lookup (never a scan).

Responsibilities:
    - Allocate short codes (requested or randomly generated).
    - Atomically bind, rebind and unbind codes to URL record ids.
    - Resolve codes to URL record ids.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from linkshortener.dao.redis import ShortCodeRedisDAO
        >>> dao = ShortCodeRedisDAO(...)

        >>> code = dao.allocate()
        >>> dao.register(code, 'V1StGXR8_Z5jdHi6B-myT')
        >>> dao.resolve(code)
        'V1StGXR8_Z5jdHi6B-myT'
"""

from abc import ABC, abstractmethod


class ShortCodeBaseDAO(ABC):
    """Interface for short code registry data access objects (DAOs).

    Methods:
        allocate(requested_code: str | None = None, **kwargs) -> str:
            Return a short code free for registration.
            Raises ShortCodeAlreadyExistsError if the requested code is taken.
            Raises ShortCodeGenerationError if no free random code could be generated.

        register(short_code: str, record_id: str, **kwargs) -> ShortCodeBaseDAO:
            Atomically bind a free short code to a record id.
            Raises ShortCodeAlreadyExistsError if the code is already bound.

        rebind(old_code: str, new_code: str, record_id: str, **kwargs) -> ShortCodeBaseDAO:
            Move a record's binding from old_code to new_code.
            Raises ShortCodeAlreadyExistsError if new_code is bound to another record.

        resolve(short_code: str, **kwargs) -> str:
            Return the record id bound to a short code.
            Raises ShortCodeNotFoundError if the code is not bound.

        unbind(short_code: str, **kwargs) -> ShortCodeBaseDAO:
            Remove a short code binding (no-op if absent).

    All methods raise DataStoreError on connection or timeout failures.
    """

    @abstractmethod
    def allocate(self, requested_code: str | None = None, **kwargs) -> str:
        """Return a short code that is not currently bound.

        The check is best-effort: another request may bind the same code before
        register() is called. register() is the only atomic chokepoint.

        Args:
            requested_code (str | None):
                Custom code requested by the caller. If None, a random code is generated.

        Returns:
            str: The allocated short code.

        Raises:
            ShortCodeAlreadyExistsError:
                If the requested code is already bound.

            ShortCodeGenerationError:
                If every randomly generated candidate collided.
        """
        pass

    @abstractmethod
    def register(self, short_code: str, record_id: str, **kwargs) -> 'ShortCodeBaseDAO':
        """Bind a short code to a record id, failing if it is already bound.

        Raises:
            ShortCodeAlreadyExistsError:
                If the code is already bound (to any record).
        """
        pass

    @abstractmethod
    def rebind(self, old_code: str, new_code: str, record_id: str, **kwargs) -> 'ShortCodeBaseDAO':
        """Replace a record's code binding.

        Raises:
            ShortCodeAlreadyExistsError:
                If new_code is already bound to a different record. Nothing is written.
        """
        pass

    @abstractmethod
    def resolve(self, short_code: str, **kwargs) -> str:
        """Return the record id bound to a short code.

        Raises:
            ShortCodeNotFoundError:
                If no record is bound to the code.
        """
        pass

    @abstractmethod
    def unbind(self, short_code: str, **kwargs) -> 'ShortCodeBaseDAO':
        pass
