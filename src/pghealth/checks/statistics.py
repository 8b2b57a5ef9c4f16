import logging
from datetime import datetime, timezone
from typing import Optional
from ..domain.interfaces import HostConnection

logger = logging.getLogger(__name__)

LAST_STATS_RESET_QUERY = "select stats_reset from pg_catalog.pg_stat_database where datname = current_database()"


def last_stats_reset_message(last_reset: Optional[datetime], now: Optional[datetime] = None) -> str:
    if last_reset is None:
        return "Statistics have never been reset on this host"
    if last_reset.tzinfo is None:
        last_reset = last_reset.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    days_ago = (now - last_reset).days
    return f"Last statistics reset on this host was {days_ago} days ago ({last_reset.isoformat()})"


class StatisticsOnHost:
    """
    Reads when cumulative statistics were last reset on one host.
    Purely advisory: failures are logged and reported as unknown.
    """
    def __init__(self, connection: HostConnection):
        self.connection = connection

    def last_reset_timestamp(self) -> Optional[datetime]:
        try:
            rows = self.connection.execute(LAST_STATS_RESET_QUERY)
        except Exception as e:
            logger.warning("Could not read statistics reset time on host %s: %s", self.connection.host, e)
            return None
        if not rows:
            return None
        return rows[0].get("stats_reset")

    def log_last_reset(self) -> Optional[datetime]:
        last_reset = self.last_reset_timestamp()
        logger.info("%s: %s", self.connection.host, last_stats_reset_message(last_reset))
        return last_reset
