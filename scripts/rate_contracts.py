"""
AI-rate contracts against the organisation profile.
Usage: python scripts/rate_contracts.py [--item-id ITEM_ID]
"""
import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv

load_dotenv()

from contractwatch.exceptions import ContractWatchError
from contractwatch.logging_config import configure_logging
from contractwatch.workers.rating_worker import RatingWorker

logger = logging.getLogger(__name__)

def main():
    parser = argparse.ArgumentParser(description='Rate unrated contracts with the AI model')
    parser.add_argument('--item-id', type=str, default=None, help='Rate one contract instead of every unrated one')
    args = parser.parse_args()

    configure_logging()
    worker = RatingWorker()

    if args.item_id:
        try:
            rating = worker.rate_one(args.item_id)
        except ContractWatchError as e:
            logger.error(f"✗ {e.message}")
            return 1
        logger.info(f"✓ {args.item_id}: {rating.model_dump(by_alias=True)}")
        return 0

    result = worker.rate_all_unrated()
    logger.info(f"✓ Rating run finished: {result.as_dict()}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
