import asyncio
import logging

import aiohttp
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_delay,
    wait_exponential,
)

from dv_exits.config.settings import GENESIS_FETCH_RETRY_TIMEOUT

logger = logging.getLogger(__name__)


def retry_aiohttp_errors(delay: int = GENESIS_FETCH_RETRY_TIMEOUT):
    return retry(
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        wait=wait_exponential(multiplier=1, min=1, max=max(delay // 2, 1)),
        stop=stop_after_delay(delay),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )
