# Lambda events & error codes
MISSING_USER_ID = 'MISSING_USER_ID'
MISSING_URL_ID = 'MISSING_URL_ID'
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
INVALID_INPUT = 'INVALID_INPUT'
URL_NOT_FOUND = 'URL_NOT_FOUND'
FORBIDDEN = 'FORBIDDEN'
SHORTCODE_CONFLICT = 'SHORTCODE_CONFLICT'
DATA_STORE_UNAVAILABLE = 'DATA_STORE_UNAVAILABLE'
ROUTE_NOT_FOUND = 'ROUTE_NOT_FOUND'
