from linkshortener.dao.base.short_code_base_dao import ShortCodeBaseDAO
from linkshortener.dao.base.url_record_base_dao import UrlRecordBaseDAO
from linkshortener.dao.base.click_base_dao import ClickBaseDAO


__all__ = [
    'ShortCodeBaseDAO',
    'UrlRecordBaseDAO',
    'ClickBaseDAO',
]
