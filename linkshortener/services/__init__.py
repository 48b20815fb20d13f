from linkshortener.services.shortener import ShortenerService
from linkshortener.services.analytics import AnalyticsAggregator


__all__ = ['ShortenerService', 'AnalyticsAggregator']
