# Validation (1000-1999)
INVALID_REQUEST_BODY = 1001
MISSING_KEY = 1002
EMPTY_KEY = 1003
MISSING_KEY_ID = 1004
MISSING_KEY_IDS = 1005
INVALID_KEY_ID = 1006

# Not Found (2000-2999)
KEY_NOT_FOUND = 2001

# Conflict (3000-3999)
DUPLICATE_KEY = 3001

# Authentication (4000-4999)
INVALID_EXPORT_PASSWORD = 4001

# Unavailable (5000-5999)
USAGE_DATA_UPDATING = 5001
USAGE_DATA_MISSING = 5002

# Store (7000-7999)
KEY_STORE_FAILED = 7001

# Internal (8000-8999)
USAGE_REFRESH_FAILED = 8001
