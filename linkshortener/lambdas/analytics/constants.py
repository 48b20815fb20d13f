# Lambda events & error codes
MISSING_USER_ID = 'MISSING_USER_ID'
MISSING_URL_ID = 'MISSING_URL_ID'
URL_NOT_FOUND = 'URL_NOT_FOUND'
FORBIDDEN = 'FORBIDDEN'
DATA_STORE_UNAVAILABLE = 'DATA_STORE_UNAVAILABLE'
ROUTE_NOT_FOUND = 'ROUTE_NOT_FOUND'
