"""Read-only analytics over URL records and their visit counters

Classes:
    AnalyticsAggregator:
        Builds per-user dashboards and per-URL visit series.

Example:
    >>> from linkshortener.dao.redis import UrlRecordRedisDAO, ClickRedisDAO
    >>> from linkshortener.services import AnalyticsAggregator

    >>> analytics = AnalyticsAggregator(url_dao=UrlRecordRedisDAO(...), click_dao=ClickRedisDAO(...))
    >>> analytics.get_user_dashboard('user-1').summary
    DashboardSummary(total_urls=3, total_clicks=16, average_clicks_per_url=5)
"""

import logging
from collections import defaultdict

from linkshortener.models import DailyCount, DashboardSummary, UserDashboard, UrlAnalytics
from linkshortener.exceptions import ForbiddenError
from linkshortener.dao.base import UrlRecordBaseDAO, ClickBaseDAO
from linkshortener.utils.helpers import last_n_days
from linkshortener.utils.constants import ANALYTICS_WINDOW_DAYS, DASHBOARD_TOP_N


logger = logging.getLogger(__name__)


def average_clicks(total_clicks: int, total_urls: int) -> int:
    """Average clicks per URL, rounded half up; 0 when there are no URLs

    Example:
        >>> average_clicks(5, 2)
        3
        >>> average_clicks(0, 0)
        0
    """
    if total_urls == 0:
        return 0
    return (2 * total_clicks + total_urls) // (2 * total_urls)


class AnalyticsAggregator:
    """Aggregate lifetime counters and daily visit buckets

    Both operations only read. Calling them twice without visits in between
    yields equal results.
    """

    def __init__(self, url_dao: UrlRecordBaseDAO, click_dao: ClickBaseDAO):
        self.urls = url_dao
        self.clicks = click_dao

    def get_user_dashboard(self, owner_id: str) -> UserDashboard:
        """Summarize all URL records owned by a user

        Returns:
            UserDashboard:
                - summary: total URLs, total lifetime clicks, rounded average;
                - top_urls: at most 10 records by clicks (desc), ties keep listing order;
                - recent_urls: at most 10 records by creation time (desc);
                - clicks_over_time: 30 days, oldest first, summed across all records.

        Raises:
            DataStoreError:
                If the data store is unavailable.
        """
        urls = self.urls.list_by_owner(owner_id, limit=None)

        total_urls = len(urls)
        total_clicks = sum(url.clicks for url in urls)
        summary = DashboardSummary(
            total_urls=total_urls,
            total_clicks=total_clicks,
            average_clicks_per_url=average_clicks(total_clicks, total_urls),
        )

        top_urls = sorted(urls, key=lambda url: url.clicks, reverse=True)[:DASHBOARD_TOP_N]
        recent_urls = sorted(urls, key=lambda url: url.created_at, reverse=True)[:DASHBOARD_TOP_N]

        totals = defaultdict(int)
        if urls:
            series = self.clicks.get_daily_counts_many([url.id for url in urls], days=ANALYTICS_WINDOW_DAYS)
            for counts in series.values():
                for count in counts:
                    totals[count.date] += count.clicks
        clicks_over_time = [DailyCount(date=day, clicks=totals[day]) for day in last_n_days(ANALYTICS_WINDOW_DAYS)]

        logger.debug('Built user dashboard.', extra={'ownerId': owner_id, 'totalUrls': total_urls, 'totalClicks': total_clicks})
        return UserDashboard(
            summary=summary,
            top_urls=top_urls,
            recent_urls=recent_urls,
            clicks_over_time=clicks_over_time,
        )

    def get_url_analytics(self, url_id: str, requester_id: str | None = None) -> UrlAnalytics:
        """Visit series and lifetime clicks of one URL record

        Raises:
            UrlRecordNotFoundError:
                If the record does not exist.
            ForbiddenError:
                If requester_id is given and is not the record's owner.
            DataStoreError:
                If the data store is unavailable.
        """
        url = self.urls.get_by_id(url_id)
        if requester_id is not None and url.owner_id != requester_id:
            raise ForbiddenError(f"Not authorized to view analytics of URL record '{url_id}'.")

        visits = self.clicks.get_daily_counts(url.id, days=ANALYTICS_WINDOW_DAYS)
        return UrlAnalytics(url=url, visits=visits, total_clicks=url.clicks)
