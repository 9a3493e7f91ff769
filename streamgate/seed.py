"""
CLI entrypoint for seeding roles and the default admin. Run once per deploy,
before starting the API:

  python -m streamgate.seed

Idempotent: existing roles and an existing admin are left untouched.
"""

import logging
import sys

from streamgate.core.config import get_settings
from streamgate.core.database import SessionLocal
from streamgate.services.credential_store import SqlAlchemyCredentialStore
from streamgate.services.seeding import run_seed

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Seed roles and, when configured, the default admin."""
    settings = get_settings()
    db = SessionLocal()
    try:
        result = run_seed(SqlAlchemyCredentialStore(db), settings)
        logger.info(
            "Seed completed: roles_created=%s admin_created=%s",
            len(result.roles_created),
            result.admin_created,
        )
        return 0
    except Exception as e:
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
