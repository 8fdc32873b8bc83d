"""
Elasticsearch client factory.
"""

from typing import Optional

from elasticsearch import Elasticsearch

from stockapp.config import Settings, get_settings
from stockapp.logging import get_logger

logger = get_logger("search.client")


def create_search_client(settings: Optional[Settings] = None) -> Optional[Elasticsearch]:
    """
    Create an Elasticsearch client from settings.

    Returns:
        Client instance, or None when ELASTICSEARCH_URL is empty
    """
    settings = settings or get_settings()
    if not settings.search_enabled:
        logger.info("search_disabled")
        return None

    client = Elasticsearch(
        settings.elasticsearch_url,
        request_timeout=settings.elasticsearch_request_timeout,
    )
    logger.info("search_client_created", url=settings.elasticsearch_url)
    return client
