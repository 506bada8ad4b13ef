"""
Run a Contracts Finder search and store the results.
Usage: python scripts/run_ingestion.py [--keyword KEYWORD] [--initial]
"""
import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv

load_dotenv()

from contractwatch.logging_config import configure_logging
from contractwatch.workers.initial_import import run_initial_import
from contractwatch.workers.scheduler import ContractScheduler

logger = logging.getLogger(__name__)

def main():
    parser = argparse.ArgumentParser(description='Run Contracts Finder ingestion')
    parser.add_argument('--keyword', type=str, default=None, help='Single keyword (default: organisation profile keywords)')
    parser.add_argument('--initial', action='store_true', help='Only import if the database is empty')
    args = parser.parse_args()

    configure_logging()

    if args.initial:
        result = run_initial_import()
        logger.info(f"Initial import result: {result}")
        return 0 if result.get("success") else 1

    logger.info("=== Starting Ingestion ===")
    try:
        result = ContractScheduler().trigger_manual_search(args.keyword)
        logger.info(f"✓ Ingestion completed: {result.as_dict()}")
    except Exception as e:
        logger.error(f"✗ Ingestion failed: {e}")
        raise
    return 0

if __name__ == "__main__":
    sys.exit(main())
