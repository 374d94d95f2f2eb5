import os
import asyncio
import functools
import logging
from sqlalchemy.exc import SQLAlchemyError
from .errors import StorageError, StorageTimeout
from . import core

logger = logging.getLogger(__name__)

# Upper bound for a single persistence operation, interactive use
DB_OPERATION_TIMEOUT = float(os.getenv('DB_OPERATION_TIMEOUT_SECONDS', '5'))


def storage_operation(func):
    """Run a persistence coroutine inside the storage boundary.

    Database failures become StorageError and an expired deadline becomes
    StorageTimeout; both are logged with the operation name. Domain errors
    raised by the operation itself pass through untouched. Nothing is retried.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout=DB_OPERATION_TIMEOUT)
        except asyncio.TimeoutError as e:
            logger.error({'msg': 'storage_timeout', 'operation': func.__name__, 'timeout': DB_OPERATION_TIMEOUT})
            core.STORAGE_ERRORS.labels(operation=func.__name__).inc()
            raise StorageTimeout() from e
        except SQLAlchemyError as e:
            logger.error({'msg': 'storage_error', 'operation': func.__name__, 'error': str(e)}, exc_info=True)
            core.STORAGE_ERRORS.labels(operation=func.__name__).inc()
            raise StorageError() from e
    return wrapper
