"""
Cron entrypoint that deletes login sessions whose refresh window has closed.

A session row outlives its access token. Once expires_at (set at login, kept
across refreshes) has passed, the refresh endpoint refuses it; pruning reclaims
those rows.

  python -m famli.prune_sessions

Daily: 0 3 * * * cd /path/to/famli && .venv/bin/python -m famli.prune_sessions
"""

import logging
import sys
from datetime import UTC, datetime

from famli.core.database import SessionLocal
from famli.services.sessions import prune_expired_sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Prune expired sessions once; exit code 0 on success, 1 if the store failed."""
    cutoff = datetime.now(UTC)
    db = SessionLocal()
    try:
        deleted = prune_expired_sessions(db, now=cutoff)
    except Exception:
        db.rollback()
        logger.exception("Session pruning failed (cutoff=%s); no sessions removed", cutoff.isoformat())
        return 1
    finally:
        db.close()
    if deleted:
        logger.info("Expired sessions pruned: cutoff=%s sessions_deleted=%s", cutoff.isoformat(), deleted)
    else:
        logger.info("No expired sessions to prune (cutoff=%s)", cutoff.isoformat())
    return 0


if __name__ == "__main__":
    sys.exit(main())
