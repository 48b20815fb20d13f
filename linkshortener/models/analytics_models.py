from dataclasses import dataclass, field
from datetime import date
from typing import Any

from linkshortener.models.url_record_model import UrlRecordModel


def _summarize(url: UrlRecordModel) -> dict[str, Any]:
    data = url.to_dict()
    return {key: data[key] for key in ('id', 'shortCode', 'originalUrl', 'title', 'clicks', 'createdAt')}


@dataclass(frozen=True)
class DailyCount:
    """Number of recorded visits on one calendar day (UTC)."""

    date: date
    clicks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {'date': self.date.isoformat(), 'clicks': self.clicks}


@dataclass(frozen=True)
class DashboardSummary:
    total_urls: int = 0
    total_clicks: int = 0
    average_clicks_per_url: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            'totalUrls': self.total_urls,
            'totalClicks': self.total_clicks,
            'averageClicksPerUrl': self.average_clicks_per_url,
        }


@dataclass(frozen=True)
class UserDashboard:
    """Per-user rollup of all owned URL records.

    Attributes:
        summary (DashboardSummary):
            Totals and average clicks across the user's URLs.
        top_urls (list[UrlRecordModel]):
            Up to 10 records with the most lifetime clicks, most clicked first.
        recent_urls (list[UrlRecordModel]):
            Up to 10 most recently created records, newest first.
        clicks_over_time (list[DailyCount]):
            Visits summed across all URLs per day, oldest first, zero-filled.
    """

    summary: DashboardSummary
    top_urls: list[UrlRecordModel] = field(default_factory=list)
    recent_urls: list[UrlRecordModel] = field(default_factory=list)
    clicks_over_time: list[DailyCount] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            'summary': self.summary.to_dict(),
            'topUrls': [_summarize(url) for url in self.top_urls],
            'recentUrls': [_summarize(url) for url in self.recent_urls],
            'clicksOverTime': [day.to_dict() for day in self.clicks_over_time],
        }


@dataclass(frozen=True)
class UrlAnalytics:
    url: UrlRecordModel
    visits: list[DailyCount] = field(default_factory=list)
    total_clicks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            'url': self.url.to_dict(),
            'visits': [day.to_dict() for day in self.visits],
            'totalClicks': self.total_clicks,
        }
