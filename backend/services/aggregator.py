"""Fold issues into per-group, per-category counts and HLE sums."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from services.classifier import CATEGORY_ORDER
from services.issue import parse_effort
from services.percentages import derive_hle_series, derive_percentages
from services.versions import GroupBy, group_key_fn, sort_groups

logger = logging.getLogger(__name__)


def _empty_cells() -> dict:
    return {category.value: 0 for category in CATEGORY_ORDER}


@dataclass
class AggregateTable:
    """Counts and HLE sums keyed by group, then by category name.

    Every group present carries all four categories.
    """

    counts_by_group: dict = field(default_factory=dict)
    hle_by_group: dict = field(default_factory=dict)
    total_issues: int = 0

    def add(self, group: str, category, hle: float):
        if group not in self.counts_by_group:
            self.counts_by_group[group] = _empty_cells()
            self.hle_by_group[group] = _empty_cells()

        self.counts_by_group[group][category.value] += 1
        self.hle_by_group[group][category.value] += hle
        self.total_issues += 1

    def round_hle(self, digits: int = 2):
        for cells in self.hle_by_group.values():
            for category, value in cells.items():
                cells[category] = round(value, digits)

    def groups(self) -> list:
        return sort_groups(self.counts_by_group)


def aggregate(issues, key_fn, classifier) -> AggregateTable:
    """Build the AggregateTable for a list of issues.

    Args:
        issues: Issue records
        key_fn: Function returning the group key of an issue
        classifier: IssueClassifier used to pick the category

    Returns:
        AggregateTable with HLE sums rounded to 2 decimals
    """
    table = AggregateTable()

    for issue in issues:
        group = key_fn(issue)
        category = classifier.classify(issue)
        hle = parse_effort(issue.effort, issue.key)
        table.add(group, category, hle)

    table.round_hle()
    return table


def validate_process_input(issues, group_by) -> GroupBy:
    """Reject caller errors before any work is done."""
    if isinstance(issues, (str, bytes)) or not isinstance(issues, Sequence):
        raise TypeError(f"process_issues expects a list of issues, got {type(issues).__name__}")
    return GroupBy.parse(group_by)


def process_issues(issues, group_by, classifier) -> dict:
    """Aggregate issues into the structure consumed by the charts.

    Raises:
        TypeError: If issues is not a list-like sequence
        ValueError: If group_by is not a known grouping mode
    """
    group_by = validate_process_input(issues, group_by)

    logger.info(f"Processing {len(issues)} issues grouped by {group_by.value}")

    table = aggregate(issues, group_key_fn(group_by), classifier)
    groups = table.groups()
    categories = [category.value for category in CATEGORY_ORDER]

    logger.info(f"Processed {len(groups)} groups")

    return {
        "groups": groups,
        "categories": categories,
        "countsByGroup": table.counts_by_group,
        "hleByGroup": table.hle_by_group,
        "totalIssues": table.total_issues,
        "percentages": derive_percentages(groups, categories, table.hle_by_group),
        "hleSeries": derive_hle_series(groups, categories, table.hle_by_group),
    }


def partition_by_team(issues, team_labels) -> dict:
    """Split issues by team tag; teams without issues are left out."""
    partitions = {}
    for label in team_labels:
        team_issues = [issue for issue in issues if issue.team == label]
        if team_issues:
            partitions[label] = team_issues
    return partitions
