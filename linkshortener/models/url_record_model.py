from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class UrlRecordModel:
    """Represent a shortened URL record.

    Attributes:
        id (str):
            Opaque, immutable and globally unique record identifier.
        original_url (str):
            The original long URL that the short code redirects to.
        short_code (str):
            The unique short token appearing in the shortened link.
        owner_id (Optional[str]):
            Identifier of the owning user. None for anonymous links.
        title (Optional[str]):
            Optional human-readable title (at most 200 characters).
        description (Optional[str]):
            Optional description (at most 500 characters).
        clicks (int):
            Lifetime click counter. Only ever increases.
        created_at (Optional[datetime]):
            Creation moment (UTC).
        updated_at (Optional[datetime]):
            Last modification moment (UTC), never earlier than created_at.
        expires_at (Optional[datetime]):
            Moment after which the link no longer redirects.

    Example:
        >>> url = UrlRecordModel(
        ...     id="V1StGXR8_Z5jdHi6B-myT",
        ...     original_url="https://example.com/article/123",
        ...     short_code="my-link",
        ... )
        >>> url.clicks
        0
    """

    id: str
    original_url: str
    short_code: str
    owner_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    clicks: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'originalUrl': self.original_url,
            'shortCode': self.short_code,
            'userId': self.owner_id,
            'title': self.title,
            'description': self.description,
            'clicks': self.clicks,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
            'expiresAt': _isoformat(self.expires_at),
        }


# fmt: off
@dataclass(frozen=True)
class UrlRecordPatch:
    short_code: Optional[str] = None    # New short code, None keeps the current one
    title: Optional[str] = None         # New title, None keeps the current one
    description: Optional[str] = None   # New description, None keeps the current one
# fmt: on
