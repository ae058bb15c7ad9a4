"""Pipeline that turns strike feed changes into notifications."""
import logging
from typing import Optional

from notifier.github_issues import IssueNotifier
from processor.differ import diff_active_strikes
from processor.models import ActiveStrikes, RunResult
from processor.strike_processor import StrikeProcessor
from scraper.strike_tracker import StrikeFeed
from storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

STATUS_FIRST_RUN = 'first_run'
STATUS_NO_CHANGE = 'no_change'
STATUS_NOTIFIED = 'notified'


class StrikePipeline:
    """Runs fetch, normalize, diff, notify and persist in sequence."""

    def __init__(
        self,
        feed: StrikeFeed,
        store: SnapshotStore,
        notifier: IssueNotifier,
        processor: Optional[StrikeProcessor] = None
    ):
        self.feed = feed
        self.store = store
        self.notifier = notifier
        self.processor = processor or StrikeProcessor()

    def run(self) -> RunResult:
        """
        Execute one detection run.

        Without a previous snapshot the current one is persisted and nothing
        is sent. When nothing changed the run ends without writing. Any error
        aborts the run before the snapshot is persisted.

        Returns:
            RunResult describing which path the run took
        """
        logger.info("Fetching and parsing latest strike data for active strikes...")
        raw_records = self.feed.fetch_records()
        active_strikes = self.processor.normalize(raw_records)

        logger.info("Fetching previous active strike data...")
        previous_strikes = self.store.load()

        if previous_strikes is None:
            logger.warning("No previous active strike data")
            self._persist(active_strikes)
            return RunResult(
                status=STATUS_FIRST_RUN,
                active_count=len(active_strikes),
                persisted=True
            )

        diff = diff_active_strikes(previous_strikes, active_strikes)
        if diff is None:
            logger.info(
                "No newly active or newly inactive strikes since we last checked"
            )
            return RunResult(
                status=STATUS_NO_CHANGE,
                active_count=len(active_strikes)
            )

        self.notifier.notify_all(diff.added, diff.removed)
        self._persist(active_strikes)

        return RunResult(
            status=STATUS_NOTIFIED,
            active_count=len(active_strikes),
            newly_active=len(diff.added),
            newly_inactive=len(diff.removed),
            persisted=True
        )

    def _persist(self, active_strikes: ActiveStrikes) -> None:
        logger.info("Persisting latest active strike data...")
        self.store.save(active_strikes)
