"""Strike feed readers for the Cornell ILR Labor Action Tracker."""
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import requests

from processor.models import reject_json_constant

logger = logging.getLogger(__name__)

FEED_PREFIX = re.compile(r'^window\.geodata=')


def parse_feed_payload(payload: str) -> List[Dict[str, Any]]:
    """
    Decode the tracker's ``window.geodata=[...]`` script into records.

    Args:
        payload: Raw text of geodata.js

    Returns:
        List of raw strike records

    Raises:
        json.JSONDecodeError: If the payload is not valid JSON once unwrapped
        ValueError: If the payload does not hold a JSON array or
            contains NaN or Infinity
    """
    json_text = FEED_PREFIX.sub('', payload.strip(), count=1)
    records = json.loads(json_text, parse_constant=reject_json_constant)

    if not isinstance(records, list):
        raise ValueError(
            f"Strike feed must be a JSON array, got {type(records).__name__}"
        )

    return records


class StrikeFeed(ABC):
    """Source of the latest raw strike records."""

    def fetch_records(self) -> List[Dict[str, Any]]:
        """
        Fetch and decode the latest strike records.

        Returns:
            List of raw strike records
        """
        payload = self._fetch_payload()
        records = parse_feed_payload(payload)
        logger.info(f"Fetched {len(records)} records from strike feed")
        return records

    @abstractmethod
    def _fetch_payload(self) -> str:
        """Return the raw geodata.js text."""


class StrikeTrackerFeed(StrikeFeed):
    """Reads geodata.js from the live tracker site."""

    FEED_URL = "https://striketracker.ilr.cornell.edu/geodata.js"

    def __init__(self, timeout: int = 30):
        """
        Initialize the feed reader.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def _fetch_payload(self) -> str:
        """
        Download geodata.js.

        Raises:
            requests.RequestException: If the request fails
        """
        logger.info(f"Fetching strike feed from {self.FEED_URL}")
        response = requests.get(
            self.FEED_URL,
            headers={'Cache-Control': 'no-cache'},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.text


class StaticStrikeFeed(StrikeFeed):
    """Serves a canned geodata.js payload instead of calling the site."""

    def __init__(self, payload: str):
        self.payload = payload

    def _fetch_payload(self) -> str:
        logger.info("Using canned strike feed payload")
        return self.payload
