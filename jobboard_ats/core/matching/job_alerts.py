"""
Periodic job-alert runner.

Invoked by an external scheduler and authenticated with a shared secret.
For each active saved search that is due, it matches postings created
since the last alert and emails the owner, even when nothing matched so
the user knows the alert is alive. A search is stamped as sent only when
delivery succeeded, so a failed search is retried on the next run. A
sender that does not deliver (the log-only one) makes the run a dry run.
"""

import hmac
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from jobboard_ats.core.exceptions import UnauthenticatedError
from jobboard_ats.core.matching.job_matcher import JobMatcher
from jobboard_ats.data.database import DatabaseManager
from jobboard_ats.data.models import SavedSearch, User
from jobboard_ats.data.repositories import JobRepository, SavedSearchRepository, UserRepository
from jobboard_ats.services import notifications
from jobboard_ats.services.notifications import NotificationSender
from jobboard_ats.utils.config import AppSettings, get_settings
from jobboard_ats.utils.constants import AlertFrequency
from jobboard_ats.utils.logger import LoggerMixin


@dataclass
class JobAlertSummary:
    """Counters reported at the end of a run."""

    total_searches: int = 0
    processed: int = 0
    emails_sent: int = 0
    errors: int = 0
    dry_run: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


def alert_since(
    search: SavedSearch,
    now: datetime,
    daily_window: timedelta = timedelta(hours=24),
    weekly_window: timedelta = timedelta(days=7),
) -> Optional[datetime]:
    """
    Decide whether a saved search is due.

    Returns:
        The creation-time cursor for matching when due, otherwise None
    """
    if search.frequency == AlertFrequency.DAILY:
        window = daily_window
    elif search.frequency == AlertFrequency.WEEKLY:
        window = weekly_window
    else:
        return None

    window_start = now - window
    if search.last_sent is None:
        return window_start
    if search.last_sent < window_start:
        return search.last_sent
    return None


class JobAlertRunner(LoggerMixin):
    """Sends due job alerts for every active saved search."""

    def __init__(
        self,
        saved_searches: SavedSearchRepository,
        users: UserRepository,
        matcher: JobMatcher,
        notifier: NotificationSender,
        settings: Optional[AppSettings] = None,
    ):
        self._saved_searches = saved_searches
        self._users = users
        self._matcher = matcher
        self._notifier = notifier
        self._settings = settings or get_settings()

    @classmethod
    def from_database(
        cls, db_manager: DatabaseManager, notifier: NotificationSender
    ) -> "JobAlertRunner":
        return cls(
            saved_searches=SavedSearchRepository(db_manager),
            users=UserRepository(db_manager),
            matcher=JobMatcher(JobRepository(db_manager)),
            notifier=notifier,
        )

    def authorize(self, secret: Optional[str]) -> None:
        """
        Check the scheduler's shared secret in constant time.

        Accepts the bare secret or an "Authorization: Bearer <secret>" value.
        An unconfigured secret rejects every caller.
        """
        expected = self._settings.scheduler.cron_secret
        if secret and secret.startswith("Bearer "):
            secret = secret[len("Bearer "):]
        if not expected or not secret:
            raise UnauthenticatedError()
        if not hmac.compare_digest(secret.encode("utf-8"), expected.encode("utf-8")):
            self.logger.warning("Job alert run rejected: invalid scheduler secret")
            raise UnauthenticatedError()

    def run(self, secret: Optional[str], now: Optional[datetime] = None) -> JobAlertSummary:
        """
        Process every active saved search once.

        A failure on one search is logged and counted, then the run moves on.
        """
        self.authorize(secret)
        now = now or datetime.utcnow()
        summary = JobAlertSummary(timestamp=now, dry_run=not self._notifier.delivers)

        if not self._settings.notifications.enabled:
            self.logger.warning("Notifications disabled, job alerts not sent")
            return summary

        scheduler = self._settings.scheduler
        daily_window = timedelta(hours=scheduler.daily_window_hours)
        weekly_window = timedelta(days=scheduler.weekly_window_days)

        searches = self._saved_searches.list_active()
        summary.total_searches = len(searches)
        self.logger.info(f"Job alerts: {len(searches)} active saved searches")

        for search in searches:
            since = alert_since(search, now, daily_window, weekly_window)
            if since is None:
                continue
            summary.processed += 1
            try:
                user = self._users.get_by_id(search.user_id)
                if user is None or not user.email:
                    self.logger.warning(f"Saved search {search.id}: owner not found, skipping")
                    continue
                if self._send_alert(search, user, since, now):
                    summary.emails_sent += 1
                else:
                    summary.errors += 1
            except Exception:
                summary.errors += 1
                self.logger.exception(f"Job alert for saved search {search.id} failed")

        self.logger.info(f"Job alerts processed: {summary.to_dict()}")
        return summary

    def _send_alert(
        self, search: SavedSearch, user: User, since: datetime, now: datetime
    ) -> bool:
        """Send one alert; False when delivery failed."""
        matches = self._matcher.find_matches(search, since=since)
        base_url = self._settings.notifications.base_url
        items = [match.to_alert_item(base_url) for match in matches]

        result = self._notifier.send(notifications.job_alert(user, search, items, base_url))
        if not result.success:
            self.logger.error(f"Job alert to {user.email} failed: {result.error}")
            return False

        if not self._notifier.delivers:
            self.logger.info(f"Dry run: job alert for {user.email} not delivered, search stays due")
            return True

        self._saved_searches.mark_sent(search.id, now)
        self.logger.info(f"Job alert sent to {user.email}: {len(items)} job(s)")
        return True
