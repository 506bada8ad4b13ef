"""
Long-running scheduler process: initial import on start-up, then the daily
search and six-hourly rating jobs.
Usage: python scripts/run_scheduler.py [--skip-initial-import]
"""
import sys
import os
import time
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
    parser = argparse.ArgumentParser(description='Run the contracts scheduler')
    parser.add_argument('--skip-initial-import', action='store_true', help='Do not seed an empty database on start-up')
    args = parser.parse_args()

    configure_logging()

    if not args.skip_initial_import:
        run_initial_import()

    scheduler = ContractScheduler()
    scheduler.start()
    for job_id in ("contracts_search", "contracts_rating"):
        logger.info(f"Job status: {scheduler.get_job_status(job_id)}")

    try:
        while True:
            time.sleep(60)
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown()

if __name__ == "__main__":
    main()
