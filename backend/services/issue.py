"""Issue records mapped from raw Jira REST JSON."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
UNASSIGNED = "Unassigned"

# Jira Server returns sprints as serialized GreenHopper objects:
# "com.atlassian.greenhopper.service.sprint.Sprint@1a2b[id=1,name=6.12.0 ...,startDate=...]"
_LEGACY_SPRINT_NAME = re.compile(r"\bname=([^,\]]*)")


@dataclass(frozen=True)
class Issue:
    """A read-only Jira issue as seen by the aggregation core.

    Every optional field has exactly one fallback, applied by the accessor
    properties below rather than at each call site.
    """

    key: str
    summary: Optional[str] = None
    labels: frozenset = frozenset()
    issue_type: Optional[str] = None
    assignee: Optional[str] = None
    status: Optional[str] = None
    fix_versions: tuple = ()
    sprints: tuple = ()
    effort: Any = None
    time_spent_seconds: int = 0
    team: Optional[str] = None

    @property
    def type_name(self) -> str:
        return self.issue_type or UNKNOWN

    @property
    def assignee_name(self) -> str:
        return self.assignee or UNASSIGNED

    @property
    def status_name(self) -> str:
        return self.status or UNKNOWN

    @property
    def team_name(self) -> str:
        return self.team or UNKNOWN

    @classmethod
    def from_jira(cls, raw: dict, config, team: Optional[str] = None) -> "Issue":
        """Map a raw Jira issue dict onto an Issue.

        Args:
            raw: Issue JSON as returned by the Jira search API
            config: DashboardConfig providing the custom field ids
            team: Optional team tag attached by the caller
        """
        fields = raw.get("fields") or {}

        return cls(
            key=raw.get("key", ""),
            summary=fields.get("summary"),
            labels=frozenset(label for label in fields.get("labels") or [] if label),
            issue_type=_nested_name(fields.get("issuetype")),
            assignee=(fields.get("assignee") or {}).get("displayName"),
            status=_nested_name(fields.get("status")),
            fix_versions=tuple(_names(fields.get("fixVersions"))),
            sprints=tuple(_sprint_names(fields.get(config.sprint_field))),
            effort=fields.get(config.hle_field),
            time_spent_seconds=_time_spent(fields, raw.get("key")),
            team=team,
        )


def _nested_name(value) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("name") or None
    return None


def _names(items):
    for item in items or []:
        name = _nested_name(item)
        if name:
            yield name


def _sprint_names(items):
    for item in items or []:
        if isinstance(item, dict):
            name = item.get("name")
        elif isinstance(item, str):
            match = _LEGACY_SPRINT_NAME.search(item)
            name = match.group(1) if match else item
        else:
            name = None
        if name:
            yield name


def _time_spent(fields: dict, issue_key: Optional[str]) -> int:
    seconds = (fields.get("timetracking") or {}).get("timeSpentSeconds")
    if seconds is None:
        seconds = fields.get("timespent")
    if seconds is None:
        return 0
    try:
        return max(int(seconds), 0)
    except (TypeError, ValueError):
        logger.warning(f"Invalid tracked time for issue {issue_key}: {seconds!r}")
        return 0


def parse_effort(raw, issue_key: str) -> float:
    """Parse an HLE value, defaulting to 0.

    Missing values are silent; values that are present but not a finite,
    non-negative number are logged and treated as 0.
    """
    if raw is None or raw == "":
        return 0

    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid HLE value for issue {issue_key}: {raw!r}")
        return 0

    if isinstance(raw, bool) or not math.isfinite(value) or value < 0:
        logger.warning(f"Invalid HLE value for issue {issue_key}: {raw!r}")
        return 0

    return value


def detect_team(labels, team_labels) -> str:
    """Return the first configured team label present on the issue."""
    for team_label in team_labels:
        if team_label in labels:
            return team_label
    return UNKNOWN


def tag_teams(raw_issues: list, config) -> list:
    """Map raw Jira issues to Issues tagged with their owning team."""
    team_labels = config.team_labels
    issues = []
    for raw in raw_issues:
        labels = (raw.get("fields") or {}).get("labels") or []
        issues.append(Issue.from_jira(raw, config, team=detect_team(labels, team_labels)))
    return issues
