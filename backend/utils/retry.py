import asyncio
import logging

from pymongo.errors import AutoReconnect, ExecutionTimeout, WTimeoutError

from config.env import STORE_RETRY_BACKOFF_SECONDS
from utils.errors import StoreUnavailable

logger = logging.getLogger(__name__)

# NetworkTimeout and ServerSelectionTimeoutError are AutoReconnect subclasses
TRANSIENT_STORE_ERRORS = (AutoReconnect, ExecutionTimeout, WTimeoutError)


async def with_store_retry(operation, *args, **kwargs):
    """
    Run a single-record store operation, retrying once on a transient failure.
    A second failure surfaces as StoreUnavailable.
    """
    name = operation.__name__

    try:
        return await operation(*args, **kwargs)
    except TRANSIENT_STORE_ERRORS as e:
        logger.warning("STORE_TRANSIENT_ERROR op=%s error=%s", name, type(e).__name__)

    await asyncio.sleep(STORE_RETRY_BACKOFF_SECONDS)

    try:
        return await operation(*args, **kwargs)
    except TRANSIENT_STORE_ERRORS as e:
        logger.error("STORE_UNAVAILABLE op=%s error=%s", name, type(e).__name__)
        raise StoreUnavailable(name) from e
