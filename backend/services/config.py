"""Dashboard configuration.

The configuration is built once at process start and handed to the
components that need it. Nothing in the aggregation code reads module
level state.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(__file__), "..", "config", "dashboard-config.json"
)

SPRINT_FIELD = "customfield_10000"
HLE_FIELD = "customfield_11605"

EXCLUDED_LABELS = ("RatioExcluded", "Bughunting")
MAINTENANCE_LABELS = ("Maintenance", "DevOps")

CATEGORY_COLORS = {
    "Excluded": "#FFFF99",
    "Maintenance": "#87CEEB",
    "Bug": "#FFC0CB",
    "Product": "#98FB98",
}


@dataclass(frozen=True)
class Team:
    name: str
    label: str


@dataclass(frozen=True)
class DashboardConfig:
    """Immutable settings for the Jira client and the aggregation core."""

    jira_url: Optional[str] = None
    jira_email: Optional[str] = None
    jira_token: Optional[str] = None
    jira_cloud_id: Optional[str] = None
    filter_id: Optional[int] = None

    sprint_field: str = SPRINT_FIELD
    hle_field: str = HLE_FIELD
    excluded_labels: frozenset = frozenset(EXCLUDED_LABELS)
    maintenance_labels: frozenset = frozenset(MAINTENANCE_LABELS)
    teams: tuple = ()
    default_sprint_count: int = 6

    max_retries: int = 3
    retry_delay: float = 1.0
    timeout: float = 30.0
    max_results: int = 100

    auth_username: Optional[str] = None
    auth_password: Optional[str] = None

    colors: MappingProxyType = field(default_factory=lambda: MappingProxyType(dict(CATEGORY_COLORS)))

    @property
    def team_labels(self) -> list:
        return [team.label for team in self.teams]

    @property
    def auth_enabled(self) -> bool:
        return bool(self.auth_username and self.auth_password)


def _read_config_file(path: str) -> dict:
    """Read the optional JSON config file, returning {} when unusable."""
    if not os.path.exists(path):
        logger.info(f"No config file at {path}, using defaults and environment")
        return {}

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load dashboard config {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring dashboard config {path}: expected a JSON object")
        return {}
    return data


def _parse_int(name: str, value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _label_set(value, default) -> frozenset:
    if value is None:
        return frozenset(default)
    if isinstance(value, str):
        return frozenset((value,))
    return frozenset(label for label in value if label)


def _parse_teams(entries) -> tuple:
    teams = []
    for entry in entries or []:
        if isinstance(entry, str):
            teams.append(Team(name=entry, label=entry))
        elif isinstance(entry, dict) and entry.get("label"):
            teams.append(Team(name=entry.get("name", entry["label"]), label=entry["label"]))
        else:
            logger.warning(f"Skipping malformed team entry: {entry!r}")
    return tuple(teams)


def load_config(path: Optional[str] = None, environ: Optional[dict] = None) -> DashboardConfig:
    """Build a DashboardConfig from a JSON file overlaid with environment variables.

    Args:
        path: JSON config file; defaults to backend/config/dashboard-config.json
        environ: Mapping of environment variables; defaults to os.environ

    Returns:
        A frozen DashboardConfig

    Raises:
        ValueError: If a numeric setting is not an integer, or SPRINT_COUNT < 1
    """
    env = os.environ if environ is None else environ
    data = _read_config_file(path or DEFAULT_CONFIG_PATH)

    labels = data.get("labels") or {}
    http = data.get("http") or {}

    colors = dict(CATEGORY_COLORS)
    colors.update(data.get("colors") or {})

    sprint_count = _parse_int(
        "SPRINT_COUNT", env.get("SPRINT_COUNT", data.get("defaultSprintCount"))
    )
    if sprint_count is not None and sprint_count < 1:
        raise ValueError(f"SPRINT_COUNT must be a positive integer, got {sprint_count!r}")

    return DashboardConfig(
        jira_url=env.get("JIRA_URL", data.get("jiraUrl")),
        jira_email=env.get("JIRA_EMAIL", data.get("jiraEmail")),
        jira_token=env.get("JIRA_API_TOKEN", data.get("jiraToken")),
        jira_cloud_id=env.get("JIRA_CLOUD_ID", data.get("jiraCloudId")),
        filter_id=_parse_int("JIRA_FILTER_ID", env.get("JIRA_FILTER_ID", data.get("filterId"))),
        sprint_field=data.get("sprintField", SPRINT_FIELD),
        hle_field=data.get("hleField", HLE_FIELD),
        excluded_labels=_label_set(labels.get("excluded"), EXCLUDED_LABELS),
        maintenance_labels=_label_set(labels.get("maintenance"), MAINTENANCE_LABELS),
        teams=_parse_teams(data.get("teams")),
        default_sprint_count=sprint_count if sprint_count is not None else 6,
        max_retries=int(http.get("maxRetries", 3)),
        retry_delay=float(http.get("retryDelay", 1.0)),
        timeout=float(http.get("timeout", 30.0)),
        max_results=int(http.get("maxResults", 100)),
        auth_username=env.get("AUTH_USERNAME", data.get("authUsername")),
        auth_password=env.get("AUTH_PASSWORD", data.get("authPassword")),
        colors=MappingProxyType(colors),
    )
