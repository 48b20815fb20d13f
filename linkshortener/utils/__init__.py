from linkshortener.utils.config import app_env, app_name, project_root, app_prefix, load_config, redis_settings
from linkshortener.utils.helpers import (
    base_url,
    get_short_url,
    utc_now,
    last_n_days,
    is_absolute_url,
    require_environment,
    guarantee_500_response,
)
from linkshortener.utils.shortener import generate_shortcode, generate_record_id
from linkshortener.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'generate_record_id',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'load_config',
    'redis_settings',
    'base_url',
    'get_short_url',
    'utc_now',
    'last_n_days',
    'is_absolute_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
