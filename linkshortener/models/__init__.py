from linkshortener.models.url_record_model import UrlRecordModel, UrlRecordPatch
from linkshortener.models.analytics_models import DailyCount, DashboardSummary, UserDashboard, UrlAnalytics


__all__ = [
    'UrlRecordModel',
    'UrlRecordPatch',
    'DailyCount',
    'DashboardSummary',
    'UserDashboard',
    'UrlAnalytics',
]
