"""Command line interface for applying schema migrations"""
import argparse
import asyncio
import logging

from . import migrate

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def main():
    """Apply pending migrations to the database configured in settings.conf"""
    parser = argparse.ArgumentParser(prog='python -m database')
    parser.add_argument('command', choices=['migrate'])
    parser.add_argument('--db-url', default=None, help='Override db_url from settings.conf')
    args = parser.parse_args()

    version = asyncio.run(migrate(args.db_url))
    logger.info(f"Database schema at version {version}")

if __name__ == "__main__":
    main()
