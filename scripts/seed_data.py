import argparse
import logging
import sys

from shop_backend.config import get_settings
from shop_backend.db import SqlDbClient
from shop_backend.repository import COLLECTIONS
from shop_backend.seed import reset_all, seed_collection

# Seeds the configured database (DATABASE_URL) with synthetic documents.

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(args):
    settings = get_settings()
    database_url = args.database_url or settings.database_url
    if not database_url:
        logger.error("No database configured; pass --database_url or set DATABASE_URL")
        return 1

    db = SqlDbClient(database_url)
    if args.reset:
        counts = settings.seed_counts()
        if args.collection and args.count is not None:
            counts[args.collection] = args.count
        seeded = reset_all(db, counts)
        print(f"✅ Reset all collections: {seeded}")
        return 0

    if not args.collection:
        logger.error("--collection is required unless --reset is given")
        return 1
    count = args.count if args.count is not None else settings.seed_counts()[args.collection]
    documents = seed_collection(db, args.collection, count)
    if documents:
        print(
            f"✅ Seeded {len(documents)} {args.collection} "
            f"(ids {documents[0]['id']}-{documents[-1]['id']})"
        )
    else:
        print(f"Nothing to seed for {args.collection}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Generate seed data for the shop backend."
    )
    parser.add_argument(
        "--collection",
        choices=COLLECTIONS,
        help="Collection to seed.",
    )
    parser.add_argument(
        "--count",
        type=int,
        help="Number of documents to generate (defaults to the configured count).",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop every collection and regenerate all seed data.",
    )
    parser.add_argument(
        "--database_url",
        help="SQLAlchemy URL; overrides DATABASE_URL.",
    )
    sys.exit(main(parser.parse_args()))
