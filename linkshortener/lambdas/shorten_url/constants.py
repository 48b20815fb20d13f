# Lambda events & error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_ORIGINAL_URL = 'MISSING_ORIGINAL_URL'
INVALID_INPUT = 'INVALID_INPUT'
SHORTCODE_CONFLICT = 'SHORTCODE_CONFLICT'
SHORTCODE_GENERATION_FAILED = 'SHORTCODE_GENERATION_FAILED'
DATA_STORE_UNAVAILABLE = 'DATA_STORE_UNAVAILABLE'
URL_SHORTENED = 'URL_SHORTENED'
