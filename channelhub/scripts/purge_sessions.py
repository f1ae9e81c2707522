"""
Delete expired login sessions.

Expired sessions never resolve, so this is housekeeping only. Run it from
cron or a scheduled job:

    channelhub-purge-sessions
"""

import asyncio

import structlog

from channelhub.core.config import get_settings
from channelhub.core.database import get_session_context
from channelhub.core.logging import configure_logging
from channelhub.services.sessions import purge_expired_sessions

log = structlog.get_logger()


async def purge() -> int:
    async with get_session_context() as session:
        return await purge_expired_sessions(session)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    count = asyncio.run(purge())
    print(f"Removed {count} expired session(s).")


if __name__ == "__main__":
    main()
