"""Strike processor for reducing feed records to the active strike set."""
import logging
from typing import Any, Iterable, Mapping, Optional

from processor.models import ActiveStrikes, StrikeRecord

logger = logging.getLogger(__name__)


class StrikeProcessor:
    """Processor that keeps only strikes which have not ended yet."""

    TRACKED_KIND = 'Strike'

    def normalize(self, raw_records: Iterable[Mapping[str, Any]]) -> ActiveStrikes:
        """
        Build the active strike set from raw feed records.

        Records that are protests, or strikes with an end date, are dropped.
        When two active strikes share an employer the later one wins.

        Args:
            raw_records: Records as decoded from the strike feed

        Returns:
            Dictionary mapping employer name to StrikeRecord
        """
        active_strikes: ActiveStrikes = {}
        total = 0

        for raw in raw_records:
            total += 1
            record = StrikeRecord.from_dict(raw)

            if not self._is_active_strike(record):
                continue

            employer = self._employer_key(record.employer)
            if employer is None:
                logger.warning(
                    f"Skipping active strike without an employer: {record.fields}"
                )
                continue

            record.employer = employer
            active_strikes[employer] = record

        logger.info(
            f"Found {len(active_strikes)} active strikes out of "
            f"{total} total records"
        )
        return active_strikes

    def _is_active_strike(self, record: StrikeRecord) -> bool:
        # we're only interested in strikes that haven't ended yet
        return record.kind == self.TRACKED_KIND and not record.end_date

    def _employer_key(self, employer: Any) -> Optional[str]:
        """
        Turn the Employer field into a snapshot key.

        Whole numbers are keyed by their decimal text, the way they appear
        as object keys in the persisted JSON. Empty names and other value
        types cannot name an employer.

        Args:
            employer: Raw Employer field value

        Returns:
            Employer key, or None if the value cannot be used
        """
        if isinstance(employer, str):
            return employer or None
        if isinstance(employer, int) and not isinstance(employer, bool):
            return str(employer)
        return None
