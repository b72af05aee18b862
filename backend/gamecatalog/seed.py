"""
Game Catalog API — Sample Data Loader
=======================================

What:  Loads the bundled sample catalog (data/sample_games.json).
How:   Every document goes through ``GameRepository.insert`` so it is
       validated exactly like a POST body.
Who:   The app lifespan (SEED_SAMPLE_DATA=true) and the command line:

    python -m gamecatalog.seed           # insert when the catalog is empty
    python -m gamecatalog.seed --reset   # delete every game, then insert
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from gamecatalog.services.repository import GameRepository

logger = logging.getLogger(__name__)

SAMPLE_FILE = Path(__file__).parent / "data" / "sample_games.json"


def load_sample_games(path: Path = SAMPLE_FILE) -> List[Dict[str, Any]]:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


async def seed_games(repo: GameRepository, reset: bool = False) -> int:
    """
    Insert the sample games and return how many were inserted.

    Without ``reset`` a non-empty catalog is left untouched.
    """
    if reset:
        removed = await repo.delete_all()
        logger.info("Removed %d existing games", removed)
    elif await repo.count_documents({}):
        logger.info("Catalog already has games; skipping sample data")
        return 0

    games = load_sample_games()
    for game in games:
        await repo.insert(game)
    return len(games)


async def _run(reset: bool) -> int:
    from gamecatalog.config import settings
    from gamecatalog.dependencies import repository_scope

    async with repository_scope() as repo:
        inserted = await seed_games(repo, reset=reset)

    if settings.uses_database:
        from gamecatalog.database import dispose_engine

        await dispose_engine()
    return inserted


def main() -> None:
    parser = argparse.ArgumentParser(description="Load the sample video game catalog.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="delete every existing game before inserting",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    inserted = asyncio.run(_run(args.reset))
    logger.info("Inserted %d sample games", inserted)


if __name__ == "__main__":
    main()
