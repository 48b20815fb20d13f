"""Application service for creating, resolving and managing short links

ShortenerService validates caller input and coordinates the short code
registry, the URL record store and the click tracker. Lambda handlers talk
to this service only, never to the DAOs directly.

Classes:
    ShortenerService:
        Facade over ShortCodeBaseDAO, UrlRecordBaseDAO and ClickBaseDAO.

Functions:
    validate_original_url(url) -> str
    validate_custom_code(code) -> str
    validate_title(title) -> str
    validate_description(description) -> str
    validate_page(limit, offset) -> tuple[int, int]

Example:
    >>> from linkshortener.services import ShortenerService
    >>> service = ShortenerService(code_dao=..., url_dao=..., click_dao=...)

    >>> url = service.shorten('https://example.com/blog/article-123', custom_code='my-article')
    >>> service.resolve('my-article')
    'https://example.com/blog/article-123'
"""

import re
import logging
from datetime import datetime

from linkshortener.models import UrlRecordModel, UrlRecordPatch
from linkshortener.exceptions import ForbiddenError, ValidationError
from linkshortener.dao.base import ShortCodeBaseDAO, UrlRecordBaseDAO, ClickBaseDAO
from linkshortener.dao.exceptions import (
    DataStoreError,
    LinkExpiredError,
    RecordNotFoundError,
    ShortCodeAlreadyExistsError,
    ShortCodeGenerationError,
)
from linkshortener.utils.helpers import utc_now, is_absolute_url
from linkshortener.utils.constants import (
    CUSTOM_SHORTCODE_MAX_LENGTH,
    CUSTOM_SHORTCODE_MIN_LENGTH,
    DEFAULT_PAGE_LIMIT,
    DESCRIPTION_MAX_LENGTH,
    MAX_PAGE_LIMIT,
    MAX_SHORTCODE_ATTEMPTS,
    TITLE_MAX_LENGTH,
)


logger = logging.getLogger(__name__)

CUSTOM_SHORTCODE_PATTERN = re.compile(
    rf'^[A-Za-z0-9_-]{{{CUSTOM_SHORTCODE_MIN_LENGTH},{CUSTOM_SHORTCODE_MAX_LENGTH}}}$'
)


def validate_original_url(url: str) -> str:
    if not isinstance(url, str) or not is_absolute_url(url):
        raise ValidationError(f'Invalid URL: {url!r} is not an absolute http(s) URL.', field='originalUrl')
    return url


def validate_custom_code(code: str) -> str:
    """Custom short codes: 3 to 50 characters out of [A-Za-z0-9_-]"""
    if not isinstance(code, str) or not CUSTOM_SHORTCODE_PATTERN.match(code):
        raise ValidationError(
            f'Invalid short code: must be {CUSTOM_SHORTCODE_MIN_LENGTH}-{CUSTOM_SHORTCODE_MAX_LENGTH} '
            'characters of letters, digits, underscores and hyphens.',
            field='customCode',
        )
    return code


def validate_title(title: str) -> str:
    if not isinstance(title, str) or len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f'Invalid title: must be a string of at most {TITLE_MAX_LENGTH} characters.', field='title')
    return title


def validate_description(description: str) -> str:
    if not isinstance(description, str) or len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f'Invalid description: must be a string of at most {DESCRIPTION_MAX_LENGTH} characters.',
            field='description',
        )
    return description


def validate_expires_at(expires_at: datetime) -> datetime:
    if expires_at.tzinfo is None:
        raise ValidationError('Invalid expiry: timezone information is required.', field='expiresAt')
    if expires_at <= utc_now():
        raise ValidationError('Invalid expiry: must lie in the future.', field='expiresAt')
    return expires_at


def validate_page(limit: int | None, offset: int) -> tuple[int, int]:
    """Return (limit, offset) for owner listings, limit defaulting to 50"""
    limit = DEFAULT_PAGE_LIMIT if limit is None else limit
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ValidationError(f'Invalid limit: must be an integer between 1 and {MAX_PAGE_LIMIT}.', field='limit')
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValidationError('Invalid offset: must be a non-negative integer.', field='offset')
    return limit, offset


class ShortenerService:
    """Create, resolve and manage short links

    Attributes:
        codes (ShortCodeBaseDAO):
            Short code registry.
        urls (UrlRecordBaseDAO):
            URL record store.
        clicks (ClickBaseDAO):
            Click tracker.
    """

    def __init__(self, code_dao: ShortCodeBaseDAO, url_dao: UrlRecordBaseDAO, click_dao: ClickBaseDAO):
        self.codes = code_dao
        self.urls = url_dao
        self.clicks = click_dao

    def shorten(
        self,
        original_url: str,
        custom_code: str | None = None,
        title: str | None = None,
        description: str | None = None,
        owner_id: str | None = None,
        expires_at: datetime | None = None,
    ) -> UrlRecordModel:
        """Create a short link for `original_url`

        A custom code is used as-is and a conflict is reported to the caller.
        A generated code which loses the registration race to a concurrent
        request is regenerated, at most MAX_SHORTCODE_ATTEMPTS times.

        Raises:
            ValidationError:
                If any input violates its constraints.
            ShortCodeAlreadyExistsError:
                If the custom code is already bound.
            ShortCodeGenerationError:
                If no free code could be generated.
            DataStoreError:
                If the data store is unavailable.
        """
        validate_original_url(original_url)
        if custom_code is not None:
            validate_custom_code(custom_code)
        if title is not None:
            validate_title(title)
        if description is not None:
            validate_description(description)
        if expires_at is not None:
            validate_expires_at(expires_at)

        fields = dict(owner_id=owner_id, title=title, description=description, expires_at=expires_at)

        if custom_code is not None:
            short_code = self.codes.allocate(custom_code)
            url = self.urls.create(original_url, short_code, **fields)
            logger.info('Created short link with custom code.', extra={'recordId': url.id, 'shortcode': short_code})
            return url

        for attempt in range(1, MAX_SHORTCODE_ATTEMPTS + 1):
            short_code = self.codes.allocate()
            try:
                url = self.urls.create(original_url, short_code, **fields)
            except ShortCodeAlreadyExistsError:
                logger.info(
                    'Generated short code was registered concurrently. Regenerating.',
                    extra={'shortcode': short_code, 'attempt': attempt},
                )
                continue
            logger.info('Created short link.', extra={'recordId': url.id, 'shortcode': short_code})
            return url

        raise ShortCodeGenerationError(f'Failed to register a generated short code after {MAX_SHORTCODE_ATTEMPTS} attempts.')

    def resolve(self, short_code: str) -> str:
        """Resolve a short code to its original URL and count the visit

        Click tracking is best-effort: a failure to count is logged and the
        redirect still succeeds. Expired links are not counted.

        Raises:
            ShortCodeNotFoundError | UrlRecordNotFoundError:
                If the code (or its record) does not exist.
            LinkExpiredError:
                If the record's expiry moment has passed.
            DataStoreError:
                If the data store is unavailable while resolving.
        """
        url = self.urls.get_by_code(short_code)

        if url.is_expired(utc_now()):
            raise LinkExpiredError(f"Short link '{short_code}' expired at {url.expires_at.isoformat()}.")

        try:
            self.clicks.record_visit(url.id)
        except (DataStoreError, RecordNotFoundError) as e:
            logger.warning(
                'Failed to record visit. Redirecting anyway.',
                extra={'recordId': url.id, 'shortcode': short_code, 'reason': str(e), 'error': e.__class__.__name__},
            )

        return url.original_url

    def get_url(self, record_id: str, requester_id: str | None = None) -> UrlRecordModel:
        """Return a URL record; Forbidden when a requester other than the owner asks"""
        url = self.urls.get_by_id(record_id)
        if requester_id is not None and url.owner_id != requester_id:
            raise ForbiddenError(f"Not authorized to view URL record '{record_id}'.")
        return url

    def list_urls(self, owner_id: str, limit: int | None = DEFAULT_PAGE_LIMIT, offset: int = 0) -> list[UrlRecordModel]:
        limit, offset = validate_page(limit, offset)
        return self.urls.list_by_owner(owner_id, limit=limit, offset=offset)

    def update_url(self, record_id: str, requester_id: str | None, patch: UrlRecordPatch) -> UrlRecordModel:
        """Validate and apply a patch (short code, title, description)

        Raises:
            ValidationError, UrlRecordNotFoundError, ForbiddenError,
            ShortCodeAlreadyExistsError, DataStoreError
        """
        if patch.short_code is not None:
            validate_custom_code(patch.short_code)
        if patch.title is not None:
            validate_title(patch.title)
        if patch.description is not None:
            validate_description(patch.description)

        url = self.urls.update(record_id, requester_id, patch)
        logger.info('Updated short link.', extra={'recordId': url.id, 'shortcode': url.short_code})
        return url

    def delete_url(self, record_id: str, requester_id: str | None = None) -> None:
        self.urls.delete(record_id, requester_id)
        logger.info('Deleted short link.', extra={'recordId': record_id})
