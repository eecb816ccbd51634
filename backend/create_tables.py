# create_tables.py — run once to create missing tables (development helper)
from transaction_api.db.session import engine
from transaction_api.db.base import Base
from transaction_api.db import models  # noqa: F401  registers the tables on Base
import logging, sys

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

logger.info("Creating tables in the database (if not exist)...")
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Done.")
except Exception:
    logger.exception("Error creating tables:")
    sys.exit(1)
