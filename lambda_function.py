"""AWS Lambda handler for the Picket Line Notifier."""
import json
import logging
import os
import time
from typing import Any, Dict, Mapping, Optional

from notifier.github_issues import (
    GitHubIssueClient,
    IssueNotifier,
    LoggingIssueClient,
)
from processor.models import PipelineConfig
from processor.pipeline import StrikePipeline
from processor.strike_processor import StrikeProcessor
from scraper.strike_tracker import StaticStrikeFeed, StrikeTrackerFeed
from storage.snapshot_store import S3SnapshotStore, StaticSnapshotStore


# Attributes every LogRecord carries; anything else came from extra=
RESERVED_LOG_ATTRS = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', None, None))
) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in RESERVED_LOG_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_config(environ: Optional[Mapping[str, str]] = None) -> PipelineConfig:
    """
    Read pipeline configuration from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        PipelineConfig with defaults for unset variables

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    if environ is None:
        environ = os.environ

    defaults = PipelineConfig()

    return PipelineConfig(
        github_token=environ.get('GITHUB_USER_TOKEN', defaults.github_token),
        github_owner=environ.get('GITHUB_OWNER', defaults.github_owner),
        github_repo=environ.get('GITHUB_REPO', defaults.github_repo),
        issue_delay_seconds=float(environ.get(
            'TIME_TO_WAIT_BETWEEN_GITHUB_ISSUE_CREATIONS',
            defaults.issue_delay_seconds
        )),
        bucket_name=environ.get('BUCKET_NAME', defaults.bucket_name),
        snapshot_key=environ.get('SNAPSHOT_KEY', defaults.snapshot_key),
        timeout_seconds=int(environ.get('TIMEOUT_SECONDS', defaults.timeout_seconds)),
        log_level=environ.get('LOG_LEVEL', defaults.log_level),
        debug_feed_payload=environ.get('DEBUG_LATEST_STRIKE_DATA') or None,
        debug_previous_snapshot=environ.get('DEBUG_PREVIOUS_ACTIVE_STRIKE_DATA') or None,
        debug_issue_creation=bool(environ.get('DEBUG_GITHUB_ISSUE_CREATION'))
    )


def build_pipeline(config: PipelineConfig) -> StrikePipeline:
    """
    Wire the pipeline components, swapping in canned ones for debug runs.

    Args:
        config: Pipeline configuration

    Returns:
        StrikePipeline ready to run
    """
    if config.debug_feed_payload:
        feed = StaticStrikeFeed(config.debug_feed_payload)
    else:
        feed = StrikeTrackerFeed(timeout=config.timeout_seconds)

    if config.debug_previous_snapshot:
        store = StaticSnapshotStore(config.debug_previous_snapshot)
    else:
        store = S3SnapshotStore(
            bucket_name=config.bucket_name,
            key=config.snapshot_key,
            timeout=config.timeout_seconds
        )

    if config.debug_issue_creation:
        client = LoggingIssueClient(config.github_owner, config.github_repo)
    else:
        client = GitHubIssueClient(
            owner=config.github_owner,
            repo=config.github_repo,
            token=config.github_token,
            timeout=config.timeout_seconds
        )

    notifier = IssueNotifier(client, delay_seconds=config.issue_delay_seconds)

    return StrikePipeline(
        feed=feed,
        store=store,
        notifier=notifier,
        processor=StrikeProcessor()
    )


def lambda_handler(event: Dict[str, Any], context: Any) -> None:
    """
    Main Lambda handler function for the Picket Line Notifier.

    Args:
        event: EventBridge schedule event payload (unused)
        context: Lambda context object

    Raises:
        Exception: Any failure is logged and re-raised to fail the invocation
    """
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)

    start_time = time.time()

    try:
        config = load_config()
        logger.info(
            "Lambda execution started",
            extra={
                'bucket_name': config.bucket_name,
                'snapshot_key': config.snapshot_key,
                'issue_delay_seconds': config.issue_delay_seconds
            }
        )

        pipeline = build_pipeline(config)
        result = pipeline.run()
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        raise

    duration = time.time() - start_time
    logger.info(
        f"Done! Run finished with status {result.status}",
        extra={
            'duration_seconds': round(duration, 2),
            'status': result.status,
            'active_strikes': result.active_count,
            'newly_active': result.newly_active,
            'newly_inactive': result.newly_inactive,
            'persisted': result.persisted
        }
    )
