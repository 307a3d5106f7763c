import os

# set environment variables
os.environ.setdefault('GENESIS_FETCH_RETRY_TIMEOUT', '0')
os.environ.setdefault('BEACON_API_TIMEOUT', '5')
