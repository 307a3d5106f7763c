from decouple import config

# common
LOG_LEVEL: str = config('LOG_LEVEL', default='INFO')

# beacon node
BEACON_API_TIMEOUT: int = config('BEACON_API_TIMEOUT', default=60, cast=int)

# 0 disables retries: a failed genesis fetch surfaces on the first attempt
GENESIS_FETCH_RETRY_TIMEOUT: int = config('GENESIS_FETCH_RETRY_TIMEOUT', default=0, cast=int)
