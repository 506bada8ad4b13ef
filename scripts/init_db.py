"""
Simple schema initialization script - creates all tables.
Use this instead of Alembic for MVP.
"""
import sys
import os
import logging

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv

load_dotenv()

from contractwatch.database import engine, Base
from contractwatch import models  # noqa: F401  registers tables on Base

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def init_db():
    """Create all tables defined in models."""
    logger.info("Creating database schema...")
    Base.metadata.create_all(bind=engine)
    logger.info(f"✓ Schema created: {', '.join(sorted(Base.metadata.tables))}")

if __name__ == "__main__":
    init_db()
