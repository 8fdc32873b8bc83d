"""
StockApp Core Library.

This package provides the core functionality for the StockApp backend,
including database management, models, repositories, the Redis cache,
the Elasticsearch search index, change notification and logging.

Usage:
    # Database
    from stockapp.db import db, get_db
    from stockapp.models import Product, Category, Location
    from stockapp.repositories import ProductRepository

    # Config
    from stockapp.config import get_settings, Settings

    # Logging
    from stockapp.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Users should import directly from submodules:
#   from stockapp.db import db
#   from stockapp.config import get_settings
#   from stockapp.logging import get_logger
