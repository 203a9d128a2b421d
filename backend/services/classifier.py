"""Issue classification into the four dashboard categories."""

from enum import Enum


class Category(str, Enum):
    EXCLUDED = "Excluded"
    MAINTENANCE = "Maintenance"
    BUG = "Bug"
    PRODUCT = "Product"


# Display order; also the classification priority, highest first.
CATEGORY_ORDER = (
    Category.EXCLUDED,
    Category.MAINTENANCE,
    Category.BUG,
    Category.PRODUCT,
)

BUG_TYPE = "Bug"


class IssueClassifier:
    """Assign every issue to exactly one Category.

    Priority order, first match wins:
        1. any excluded label    -> Excluded
        2. any maintenance label -> Maintenance
        3. issue type "Bug"      -> Bug
        4. everything else       -> Product
    """

    def __init__(self, excluded_labels, maintenance_labels):
        self.excluded_labels = frozenset(excluded_labels)
        self.maintenance_labels = frozenset(maintenance_labels)

    @classmethod
    def from_config(cls, config) -> "IssueClassifier":
        return cls(config.excluded_labels, config.maintenance_labels)

    def classify(self, issue) -> Category:
        labels = issue.labels or frozenset()

        if not self.excluded_labels.isdisjoint(labels):
            return Category.EXCLUDED

        if not self.maintenance_labels.isdisjoint(labels):
            return Category.MAINTENANCE

        if issue.issue_type == BUG_TYPE:
            return Category.BUG

        return Category.PRODUCT
