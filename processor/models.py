"""Data models for strike change detection."""
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional


EMPLOYER_FIELD = 'Employer'
KIND_FIELD = 'Strike or Protest'
END_DATE_FIELD = 'End Date'


def reject_json_constant(token: str) -> None:
    """Refuse the NaN and Infinity literals that strict JSON does not allow."""
    raise ValueError(f"Invalid JSON constant: {token}")


@dataclass
class StrikeRecord:
    """Strike feed record with its key fields extracted."""
    employer: Optional[str]
    kind: Optional[str]
    end_date: Any
    fields: Dict[str, Any]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> 'StrikeRecord':
        """
        Build a record from a raw feed mapping.

        Args:
            raw: Mapping of field name to value as published by the feed

        Returns:
            StrikeRecord preserving every original field

        Raises:
            ValueError: If raw is not a mapping
        """
        if not isinstance(raw, Mapping):
            raise ValueError(
                f"Strike record must be an object, got {type(raw).__name__}"
            )

        return cls(
            employer=raw.get(EMPLOYER_FIELD),
            kind=raw.get(KIND_FIELD),
            end_date=raw.get(END_DATE_FIELD),
            fields=dict(raw)
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.fields


# Employer name -> currently active strike
ActiveStrikes = Dict[str, StrikeRecord]


@dataclass
class DiffResult:
    """Strikes that became active or inactive between two snapshots."""
    added: List[StrikeRecord]
    removed: List[StrikeRecord]


@dataclass
class Notification:
    """Issue to be opened for a single strike change."""
    title: str
    body: str
    labels: FrozenSet[str]


@dataclass
class PipelineConfig:
    """Runtime configuration read from the Lambda environment."""
    github_token: str = ''
    github_owner: str = 'jamespizzurro'
    github_repo: str = 'picket-line-notifier'
    issue_delay_seconds: float = 10.0
    bucket_name: str = 'picket-line-discoverer-strike-data'
    snapshot_key: str = 'active-strikes.json'
    timeout_seconds: int = 30
    log_level: str = 'INFO'
    debug_feed_payload: Optional[str] = None
    debug_previous_snapshot: Optional[str] = None
    debug_issue_creation: bool = False


@dataclass
class RunResult:
    """Summary of one pipeline run."""
    status: str
    active_count: int
    newly_active: int = 0
    newly_inactive: int = 0
    persisted: bool = False
