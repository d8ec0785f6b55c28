"""Create the gigboard tables (vacancies, search_logs, job_postings_log)."""
import argparse
import logging

from gigboard.db.models import Base
from gigboard.db.session import ENGINE, current_engine_url, test_connection

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Initialize the gigboard database schema")
    parser.add_argument("--check", action="store_true", help="Only test the connection, do not create tables")
    args = parser.parse_args()

    url = current_engine_url()
    if not test_connection():
        logger.error("Cannot connect to %s", url)
        raise SystemExit(1)
    if args.check:
        logger.info("Connection OK: %s", url)
        return

    logger.info("Initializing database schema at %s...", url)
    Base.metadata.create_all(bind=ENGINE)
    logger.info("Tables: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    main()
