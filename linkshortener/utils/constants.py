# Visit bucket retention (sliding window)
VISIT_RETENTION_DAYS = 30
VISIT_RETENTION_SECONDS = 60 * 60 * 24 * VISIT_RETENTION_DAYS

# Analytics windows
ANALYTICS_WINDOW_DAYS = 30
DASHBOARD_TOP_N = 10

# Short codes
SHORTCODE_LENGTH = 7
SHORTCODE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-'
MAX_SHORTCODE_ATTEMPTS = 5
CUSTOM_SHORTCODE_MIN_LENGTH = 3
CUSTOM_SHORTCODE_MAX_LENGTH = 50

# URL record ids
RECORD_ID_LENGTH = 21

# URL record metadata limits
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 500

# Owner listing
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 1000

# Redis client socket timeout (seconds)
DEFAULT_REDIS_SOCKET_TIMEOUT = 5

# Application environment variables
APP_ENV_ENV = 'APP_ENV'
APP_NAME_ENV = 'APP_NAME'
PROJECT_ROOT_ENV = 'PROJECT_ROOT'
AWS_SAM_LOCAL_ENV = 'AWS_SAM_LOCAL'
LOG_LEVEL_ENV = 'LOG_LEVEL'

# AppConfig environment variables
APPCONFIG_APP_ID_ENV = 'APPCONFIG_APP_ID'
APPCONFIG_ENV_ID_ENV = 'APPCONFIG_ENV_ID'
APPCONFIG_PROFILE_ID_ENV = 'APPCONFIG_PROFILE_ID'
APPCONFIG_AGENT_URL_ENV = 'APPCONFIG_AGENT_URL'
APPCONFIG_PROFILE_NAME_ENV = 'APPCONFIG_PROFILE_NAME'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
