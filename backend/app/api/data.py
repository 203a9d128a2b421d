"""Dashboard data API endpoints."""

from flask import Blueprint, current_app, jsonify, request

from services.dashboard import DashboardService
from services.jira_client import JiraAPIError

bp = Blueprint("data", __name__, url_prefix="/api")


def get_sprint_count():
    """Get optional sprint count from query params.

    Query params:
        - sprints: Number of newest sprints/versions to include (e.g., 6)

    Returns:
        int or None

    Raises:
        ValueError: If the value is not a positive integer
    """
    sprints = request.args.get("sprints")
    if not sprints:
        return None
    try:
        count = int(sprints)
    except ValueError:
        raise ValueError(f"Invalid sprints value: {sprints!r}. Must be a positive number.")
    if count < 1:
        raise ValueError(f"Invalid sprints value: {sprints!r}. Must be a positive number.")
    return count


def get_group_by():
    return request.args.get("group_by", "sprint")


def get_service():
    return DashboardService(current_app.config["DASHBOARD_CONFIG"])


@bp.route("/data", methods=["GET"])
def get_data():
    """Get aggregated dashboard data for all teams and each team.

    Query params:
        - sprints: Optional number of newest groups to include
        - group_by: "sprint" (default) or "fix_version"

    Returns:
        - Group order, counts and HLE sums per category
        - Percentage and absolute HLE series for the charts
        - Sorted table rows
        - The same per team
    """
    try:
        sprint_count = get_sprint_count()
        group_by = get_group_by()

        current_app.logger.info(
            f"Request: all teams, sprints={sprint_count or 'default'}, group_by={group_by}"
        )

        service = get_service()
        dashboard = service.get_dashboard(group_by, sprint_count)
        return jsonify(dashboard)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except JiraAPIError as e:
        current_app.logger.error(f"Jira request failed: {e}")
        return jsonify({"error": str(e)}), 502
    except Exception as e:
        current_app.logger.exception("Failed to build dashboard data")
        return jsonify({"error": str(e) or "Internal server error"}), 500


@bp.route("/issues", methods=["GET"])
def get_issues():
    """Get the table view only.

    Query params:
        - group_by: "sprint" (default) or "fix_version"
        - team: Optional team label to filter by
    """
    try:
        service = get_service()
        rows = service.get_table(get_group_by(), request.args.get("team"))
        return jsonify({"data": rows, "total": len(rows)})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except JiraAPIError as e:
        current_app.logger.error(f"Jira request failed: {e}")
        return jsonify({"error": str(e)}), 502
    except Exception as e:
        current_app.logger.exception("Failed to build issue table")
        return jsonify({"error": str(e) or "Internal server error"}), 500
