"""Dashboard service: fetch issues and feed them through the aggregation core."""

import logging
from typing import Optional

from services.aggregator import partition_by_team, process_issues
from services.classifier import IssueClassifier
from services.issue import tag_teams
from services.jira_client import JiraClient
from services.table_view import build_rows
from services.versions import GroupBy, group_key_fn, newest_groups

logger = logging.getLogger(__name__)


class DashboardService:
    """Builds the dashboard payload for one request.

    A new service (and client) is created per request, so fetch results are
    only cached for the lifetime of that request.
    """

    def __init__(self, config, client: Optional[JiraClient] = None):
        self.config = config
        self.client = client or JiraClient(config)
        self.classifier = IssueClassifier.from_config(config)

    def load_issues(self) -> list:
        """Fetch the configured filter and tag each issue with its team."""
        raw_issues = self.client.fetch_issues_by_filter(self.config.filter_id)
        return tag_teams(raw_issues, self.config)

    def _limit_to_recent(self, issues: list, group_by: GroupBy, sprint_count: Optional[int]) -> tuple:
        """Keep only issues in the newest `sprint_count` groups.

        Returns:
            Tuple of (issues, recent group keys)
        """
        key_fn = group_key_fn(group_by)
        keys = [key_fn(issue) for issue in issues]

        if sprint_count is None:
            return issues, newest_groups(keys, len(keys))

        recent = newest_groups(keys, sprint_count)
        recent_set = set(recent)
        kept = [issue for issue, key in zip(issues, keys) if key in recent_set]
        logger.info(f"Keeping {len(kept)} of {len(issues)} issues in {len(recent)} newest groups")
        return kept, recent

    def table_rows(self, issues: list, group_by) -> list:
        rows = build_rows(issues, group_key_fn(group_by), self.classifier)
        return [row.to_dict() for row in rows]

    def build_dashboard(self, issues: list, group_by="sprint",
                        sprint_count: Optional[int] = None) -> dict:
        """Aggregate issues for all teams combined and for each team.

        Args:
            issues: Team-tagged Issue records
            group_by: "sprint" or "fix_version"
            sprint_count: Optional number of newest groups to keep

        Raises:
            ValueError: If group_by is unknown or sprint_count is not positive
        """
        group_by = GroupBy.parse(group_by)
        if sprint_count is not None and sprint_count < 1:
            raise ValueError(f"Invalid sprint count: {sprint_count}. Must be a positive number.")

        issues, recent = self._limit_to_recent(issues, group_by, sprint_count)

        all_data = process_issues(issues, group_by, self.classifier)
        all_data["tableData"] = self.table_rows(issues, group_by)

        team_labels = self.config.team_labels
        team_data = {}
        for label, team_issues in partition_by_team(issues, team_labels).items():
            team_data[label] = {
                "processedData": process_issues(team_issues, group_by, self.classifier),
                "tableData": self.table_rows(team_issues, group_by),
            }

        logger.info(
            f"Processed {all_data['totalIssues']} issues into {len(all_data['groups'])} groups"
        )

        return {
            "all": all_data,
            "teams": team_labels,
            "teamData": team_data,
            "sprintCount": len(recent),
            "currentVersion": recent[-1] if recent else None,
            "colors": dict(self.config.colors),
        }

    def get_dashboard(self, group_by="sprint", sprint_count: Optional[int] = None) -> dict:
        group_by = GroupBy.parse(group_by)
        if sprint_count is None:
            sprint_count = self.config.default_sprint_count
        return self.build_dashboard(self.load_issues(), group_by, sprint_count)

    def get_table(self, group_by="sprint", team: Optional[str] = None) -> list:
        """Table view only, optionally restricted to one team."""
        group_by = GroupBy.parse(group_by)
        issues = self.load_issues()
        if team:
            issues = [issue for issue in issues if issue.team == team]
        return self.table_rows(issues, group_by)
