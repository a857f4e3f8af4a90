"""
Project Library Backend - Topic Seeder
=======================================

What:  Loads the topic taxonomy CSV into the `topics` table.
How:   Parses the file with services/taxonomy.py, upserts through
       TopicService.import_rows() in one transaction, then logs counts.

Usage:
    python -m project_library.seed_topics path/to/topics.csv
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from project_library.database import async_session_factory, dispose_engine
from project_library.main import setup_logging
from project_library.services.taxonomy import parse_taxonomy_csv
from project_library.services.topic_service import topic_service

logger = logging.getLogger("project_library.seed_topics")


async def seed_topics(csv_path: Path) -> int:
    """Import the CSV at `csv_path`. Returns the number of rows read."""
    rows = parse_taxonomy_csv(csv_path.read_text(encoding="utf-8"))
    logger.info("Read %d taxonomy rows from %s", len(rows), csv_path)

    async with async_session_factory() as session:
        try:
            created, updated = await topic_service.import_rows(session, rows)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    logger.info("Seeded topics: %d created, %d updated", created, updated)
    return len(rows)


async def _run(csv_path: Path) -> None:
    try:
        await seed_topics(csv_path)
    finally:
        await dispose_engine()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Load the topic taxonomy CSV.")
    parser.add_argument("csv_path", type=Path, help="CSV with topic,parent,descendants,synonyms")
    args = parser.parse_args(argv)

    setup_logging()
    if not args.csv_path.is_file():
        logger.error("CSV file not found: %s", args.csv_path)
        return 1

    asyncio.run(_run(args.csv_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
