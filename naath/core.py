import os
from prometheus_client import Counter, start_http_server
import logging

logger = logging.getLogger(__name__)

METRICS_PORT = int(os.getenv('METRICS_PORT', '8001'))

COMMENTS_CREATED = Counter('naath_comments_created_total', 'Comments created', ['approved'])
COMMENTS_APPROVED = Counter('naath_comments_approved_total', 'Pending comments approved by moderators')
COMMENT_LIKE_TOGGLES = Counter('naath_comment_like_toggles_total', 'Comment like toggles', ['result'])
STORAGE_ERRORS = Counter('naath_storage_errors_total', 'Failed persistence operations', ['operation'])


def init_metrics(port: int = METRICS_PORT):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except Exception as e:
        logger.warning(f'Prometheus start failed: {e}')


async def shutdown_connections():
    """Gracefully shutdown the database connection pool"""
    from .models import engine

    logger.info("Shutting down connections...")
    try:
        await engine.dispose()
        logger.info("Database engine disposed")
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
