"""Snapshot stores for the last known set of active strikes."""
import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import boto3
import requests
from botocore.exceptions import ClientError

from processor.models import ActiveStrikes, StrikeRecord, reject_json_constant

logger = logging.getLogger(__name__)


class SnapshotStore(ABC):
    """Loads and saves the single persisted active strike snapshot."""

    CONTENT_TYPE = 'application/json; charset=utf-8'

    def load(self) -> Optional[ActiveStrikes]:
        """
        Load the previously persisted snapshot.

        Returns:
            Dictionary mapping employer to StrikeRecord, or None if there is
            no usable snapshot

        Raises:
            json.JSONDecodeError: If the stored snapshot is not valid JSON
            ValueError: If the stored snapshot is not a JSON object or contains
                NaN or Infinity
        """
        text = self._fetch_snapshot_text()
        if text is None or not text.strip():
            logger.warning("Previous snapshot is empty")
            return None

        data = json.loads(text, parse_constant=reject_json_constant)
        if data is None:
            logger.warning("Previous snapshot is empty")
            return None

        if not isinstance(data, dict):
            raise ValueError(
                f"Strike snapshot must be a JSON object, got {type(data).__name__}"
            )

        snapshot = {}
        for employer, raw in data.items():
            record = StrikeRecord.from_dict(raw)
            record.employer = employer
            snapshot[employer] = record

        logger.info(f"Loaded {len(snapshot)} previously active strikes")
        return snapshot

    def save(self, active_strikes: ActiveStrikes) -> bool:
        """
        Persist the snapshot, replacing any previous one.

        Args:
            active_strikes: Dictionary mapping employer to StrikeRecord

        Returns:
            True once the snapshot has been written
        """
        body = self.serialize(active_strikes)
        self._put_snapshot(body)
        logger.info(f"Persisted {len(active_strikes)} active strikes")
        return True

    @staticmethod
    def serialize(active_strikes: ActiveStrikes) -> bytes:
        """Encode a snapshot as compact UTF-8 JSON."""
        data = {
            employer: strike.to_dict()
            for employer, strike in active_strikes.items()
        }
        return json.dumps(
            data, ensure_ascii=False, allow_nan=False, separators=(',', ':')
        ).encode('utf-8')

    @abstractmethod
    def _fetch_snapshot_text(self) -> Optional[str]:
        """Return the stored snapshot text, or None if there is none."""

    @abstractmethod
    def _put_snapshot(self, body: bytes) -> None:
        """Write the encoded snapshot."""


class S3SnapshotStore(SnapshotStore):
    """Snapshot kept as a public-read JSON object in S3."""

    def __init__(
        self,
        bucket_name: str,
        key: str,
        timeout: int = 30,
        s3_client=None
    ):
        """
        Initialize the S3 client and public object URL.

        Args:
            bucket_name: Name of the S3 bucket
            key: Object key of the snapshot
            timeout: HTTP timeout in seconds for reading the public object
            s3_client: Optional preconfigured boto3 S3 client
        """
        self.bucket_name = bucket_name
        self.key = key
        self.timeout = timeout
        self.public_url = f"https://{bucket_name}.s3.amazonaws.com/{key}"
        self.s3 = s3_client or boto3.client('s3')
        logger.info(f"Initialized S3SnapshotStore for s3://{bucket_name}/{key}")

    def _fetch_snapshot_text(self) -> Optional[str]:
        logger.info(f"Fetching previous snapshot from {self.public_url}")
        response = requests.get(
            self.public_url,
            headers={'Cache-Control': 'no-cache'},
            timeout=self.timeout
        )

        if not response.ok:
            # Missing objects in a public bucket answer 403 or 404
            logger.warning(
                f"Previous snapshot unavailable (HTTP {response.status_code})",
                extra={'status_code': response.status_code}
            )
            return None

        return response.text

    def _put_snapshot(self, body: bytes) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=self.key,
                Body=body,
                ContentType=self.CONTENT_TYPE,
                ACL='public-read'
            )
        except ClientError as e:
            logger.error(f"Error writing snapshot to S3: {e}")
            raise


class StaticSnapshotStore(SnapshotStore):
    """Serves a canned snapshot and keeps saved snapshots in memory."""

    def __init__(self, snapshot_text: Optional[str]):
        self.snapshot_text = snapshot_text
        self.saved_payloads: List[bytes] = []

    def _fetch_snapshot_text(self) -> Optional[str]:
        logger.info("Using canned previous snapshot")
        return self.snapshot_text

    def _put_snapshot(self, body: bytes) -> None:
        logger.debug("Skipping S3 write for canned snapshot store")
        self.saved_payloads.append(body)
