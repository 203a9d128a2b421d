"""Chart series derived from the HLE (effort) table.

Two different averages live here and must not be mixed up:

- the percentage series ends with an effort-weighted average
  (weighted_average_percentage), so large groups count for more;
- the absolute HLE series ends with a plain arithmetic mean over groups
  (simple_mean).
"""

from services.classifier import Category

DEFAULT_EXCLUDED = (Category.EXCLUDED,)


def calculate_percentage(value: float, total: float) -> float:
    """Percentage with one decimal place; 0 when the total is 0."""
    if not total:
        return 0
    return round(value / total * 1000) / 10


def _key(category) -> str:
    return category.value if isinstance(category, Category) else category


def _included(categories, excluded) -> list:
    excluded_keys = {_key(category) for category in excluded}
    return [category for category in categories if _key(category) not in excluded_keys]


def weighted_average_percentage(groups, category, categories, hle_by_group) -> float:
    """Share of `category` in the total HLE summed over all groups."""
    category_total = sum(hle_by_group[group][_key(category)] for group in groups)
    grand_total = sum(
        hle_by_group[group][_key(other)] for group in groups for other in categories
    )
    return calculate_percentage(category_total, grand_total)


def derive_percentages(groups, categories, hle_by_group, excluded=DEFAULT_EXCLUDED) -> dict:
    """Per-group percentage breakdown of HLE, plus a trailing weighted average.

    Excluded categories are dropped from both numerator and denominator and
    do not appear in the result.

    Args:
        groups: Ordered group keys
        categories: Categories to report, in display order
        hle_by_group: {group: {category: hle}} as produced by the aggregator
        excluded: Categories left out of every percentage

    Returns:
        {category: [pct per group..., weighted average]}
    """
    included = _included(categories, excluded)
    percentages = {_key(category): [] for category in included}

    for group in groups:
        total = sum(hle_by_group[group][_key(category)] for category in included)
        for category in included:
            percentages[_key(category)].append(
                calculate_percentage(hle_by_group[group][_key(category)], total)
            )

    for category in included:
        percentages[_key(category)].append(
            weighted_average_percentage(groups, category, included, hle_by_group)
        )

    return percentages


def simple_mean(values) -> float:
    """Arithmetic mean rounded to 2 decimals; 0 for an empty sequence."""
    values = list(values)
    if not values:
        return 0
    return round(sum(values) / len(values), 2)


def derive_hle_series(groups, categories, hle_by_group) -> dict:
    """Absolute HLE per group for each category, plus a trailing plain mean."""
    series = {}
    for category in categories:
        values = [hle_by_group[group][_key(category)] for group in groups]
        series[_key(category)] = values + [simple_mean(values)]
    return series
