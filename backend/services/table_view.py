"""Row-per-issue table view."""

from dataclasses import asdict, dataclass

from services.issue import parse_effort
from services.versions import UNGROUPED, fix_version_key, group_sort_key

SUMMARY_MAX_LENGTH = 80
ELLIPSIS = "..."

WORK_DAY_SECONDS = 28800  # 8 hour work day
WORK_HOUR_SECONDS = 3600

TYPE_ABBREVIATIONS = {
    "Bug": "B",
    "Task": "T",
    "Story": "S",
    "Analysis": "A",
    "Tech Debt": "T",
}


def truncate_summary(summary, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    summary = summary or ""
    if len(summary) <= max_length:
        return summary
    return summary[:max_length - len(ELLIPSIS)] + ELLIPSIS


def type_abbreviation(issue_type) -> str:
    """Single letter for an issue type, falling back to its first letter."""
    if issue_type in TYPE_ABBREVIATIONS:
        return TYPE_ABBREVIATIONS[issue_type]
    return issue_type[:1].upper() if issue_type else "?"


def format_time_spent(seconds) -> str:
    """Format tracked seconds as "Xd Yh Zm" using 8 hour work days.

    Zero or missing time renders as "-"; time below one minute as "0m".
    """
    if not seconds:
        return "-"

    seconds = int(seconds)
    days, remainder = divmod(seconds, WORK_DAY_SECONDS)
    hours, remainder = divmod(remainder, WORK_HOUR_SECONDS)
    minutes = remainder // 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    return " ".join(parts) or "0m"


@dataclass(frozen=True)
class TableRow:
    group: str
    assignee: str
    type_abbr: str
    issue_type: str
    key: str
    summary: str
    hle: float
    time_spent_seconds: int
    time_spent: str
    fix_version: str
    status: str
    category: str
    team: str

    @property
    def version_mismatch(self) -> bool:
        """True when the issue's group and fix version point at different versions."""
        if self.group == UNGROUPED or self.fix_version == UNGROUPED:
            return False
        return self.group != self.fix_version

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "sprint": data["group"],
            "assignee": data["assignee"],
            "typeAbbr": data["type_abbr"],
            "issueType": data["issue_type"],
            "key": data["key"],
            "summary": data["summary"],
            "hle": data["hle"],
            "timeSpentSeconds": data["time_spent_seconds"],
            "timeSpent": data["time_spent"],
            "fixVersion": data["fix_version"],
            "status": data["status"],
            "category": data["category"],
            "team": data["team"],
            "versionMismatch": self.version_mismatch,
        }


def build_row(issue, key_fn, classifier) -> TableRow:
    return TableRow(
        group=key_fn(issue),
        assignee=issue.assignee_name,
        type_abbr=type_abbreviation(issue.type_name),
        issue_type=issue.type_name,
        key=issue.key,
        summary=truncate_summary(issue.summary),
        hle=parse_effort(issue.effort, issue.key),
        time_spent_seconds=issue.time_spent_seconds or 0,
        time_spent=format_time_spent(issue.time_spent_seconds),
        fix_version=fix_version_key(issue),
        status=issue.status_name,
        category=classifier.classify(issue).value,
        team=issue.team_name,
    )


def sort_rows(rows) -> list:
    """Newest group first (UNGROUPED last), then assignee, then issue key."""
    ordered = sorted(rows, key=lambda row: row.key)
    ordered.sort(key=lambda row: row.assignee)
    # Reversed so the newest group comes first; UNGROUPED gets the lowest key
    # so it still ends up last.
    ordered.sort(key=lambda row: _descending_group_key(row.group), reverse=True)
    return ordered


def _descending_group_key(group: str) -> tuple:
    rank, parts = group_sort_key(group)
    return (-rank, parts)


def build_rows(issues, key_fn, classifier) -> list:
    """Build the sorted table view for a list of issues."""
    return sort_rows(build_row(issue, key_fn, classifier) for issue in issues)
