# create_tables.py: create missing tables without running migrations (development helper)
import logging
import sys

from duobrain.core.config import settings
from duobrain.db import models  # noqa: F401
from duobrain.db.base import Base
from duobrain.db.session import build_engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> int:
    engine = build_engine(settings.DATABASE_URL)
    logger.info("Creating tables in %s (if not exist)...", engine.url.render_as_string(hide_password=True))
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Error creating tables:")
        return 1
    finally:
        engine.dispose()
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
