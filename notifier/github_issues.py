"""GitHub issue notifications for newly active and inactive strikes."""
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Sequence

import requests

from processor.models import Notification, StrikeRecord

logger = logging.getLogger(__name__)

NEWLY_ACTIVE_LABEL = 'newly active strike'
NEWLY_INACTIVE_LABEL = 'newly inactive strike'

TITLE_PREFIXES = {
    NEWLY_ACTIVE_LABEL: 'Newly Active Strike',
    NEWLY_INACTIVE_LABEL: 'Newly Inactive Strike',
}


def build_notification(strike: StrikeRecord, label: str) -> Notification:
    """
    Build the issue for one strike change.

    Args:
        strike: Strike that became active or inactive
        label: NEWLY_ACTIVE_LABEL or NEWLY_INACTIVE_LABEL

    Returns:
        Notification with title, pretty-printed JSON body and label
    """
    return Notification(
        title=f"{TITLE_PREFIXES[label]}: {strike.employer}",
        body=json.dumps(
            strike.to_dict(), indent=2, ensure_ascii=False, allow_nan=False
        ),
        labels=frozenset([label])
    )


class IssueClient(ABC):
    """Channel that opens one issue per notification."""

    def __init__(self, owner: str, repo: str):
        self.owner = owner
        self.repo = repo

    @abstractmethod
    def create_issue(self, notification: Notification) -> None:
        """Submit a single issue."""


class GitHubIssueClient(IssueClient):
    """Opens issues through the GitHub REST API."""

    API_URL = "https://api.github.com"

    def __init__(self, owner: str, repo: str, token: str, timeout: int = 30):
        """
        Initialize the GitHub client.

        Args:
            owner: Repository owner
            repo: Repository name
            token: Token allowed to create issues in the repository
            timeout: HTTP request timeout in seconds (default: 30)
        """
        super().__init__(owner, repo)
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'Authorization': f'Bearer {token}',
        })

    def create_issue(self, notification: Notification) -> None:
        """
        POST the notification as a new issue.

        Raises:
            requests.RequestException: If GitHub rejects or fails the request
        """
        response = self.session.post(
            f"{self.API_URL}/repos/{self.owner}/{self.repo}/issues",
            json={
                'title': notification.title,
                'body': notification.body,
                'labels': sorted(notification.labels),
            },
            timeout=self.timeout
        )
        response.raise_for_status()
        logger.info(
            f"Created issue: {notification.title}",
            extra={'issue_url': response.json().get('html_url')}
        )


class LoggingIssueClient(IssueClient):
    """Logs notifications instead of creating issues."""

    def __init__(self, owner: str, repo: str):
        super().__init__(owner, repo)
        self.submitted: List[Notification] = []

    def create_issue(self, notification: Notification) -> None:
        logger.debug(
            f"{self.owner}/{self.repo} {notification.title} "
            f"{notification.body} {sorted(notification.labels)}"
        )
        self.submitted.append(notification)


class IssueNotifier:
    """Submits strike changes one at a time, pausing between issues."""

    def __init__(
        self,
        client: IssueClient,
        delay_seconds: float = 10,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the notifier.

        Args:
            client: Channel issues are submitted to
            delay_seconds: Pause between consecutive issues of one phase
            sleep: Function used to pause (default: time.sleep)
        """
        self.client = client
        self.delay_seconds = delay_seconds
        self.sleep = sleep

    def notify_all(
        self,
        added: Sequence[StrikeRecord],
        removed: Sequence[StrikeRecord]
    ) -> None:
        """
        Open one issue per newly active, then per newly inactive strike.

        A failed submission propagates and the remaining issues are not sent.

        Args:
            added: Newly active strikes
            removed: Newly inactive strikes
        """
        logger.info(f"Processing {len(added)} newly active strikes...")
        self._notify_phase(added, NEWLY_ACTIVE_LABEL)

        logger.info(f"Processing {len(removed)} newly inactive strikes...")
        self._notify_phase(removed, NEWLY_INACTIVE_LABEL)

    def _notify_phase(self, strikes: Sequence[StrikeRecord], label: str) -> None:
        for i, strike in enumerate(strikes):
            logger.info(f"Processing {label}: {strike.employer}")
            self.client.create_issue(build_notification(strike, label))

            if i != len(strikes) - 1:
                # wait before the next issue to avoid getting throttled
                self.sleep(self.delay_seconds)
