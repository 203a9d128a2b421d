"""Jira REST client for fetching issues."""

import logging
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    401: "Jira authentication failed - check JIRA_EMAIL and JIRA_API_TOKEN",
    404: "Jira resource not found - check filter ID or Jira URL",
    429: "Jira rate limit exceeded - too many requests",
}


class JiraAPIError(Exception):
    """A Jira request failed and will not be retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JiraClient:
    """Client for the Jira search API.

    Authenticates with email + API token. When a cloud id is configured the
    request goes through the api.atlassian.com gateway (scoped tokens),
    otherwise straight to the Jira URL.
    """

    SEARCH_ENDPOINT = "/rest/api/3/search/jql"

    def __init__(self, config, session: Optional[requests.Session] = None):
        self.config = config
        self.max_retries = config.max_retries
        self.retry_delay = config.retry_delay
        self.timeout = config.timeout
        self.max_results = config.max_results
        self._session = session
        self._search_cache = {}

    def _validate_config(self):
        if not (self.config.jira_url and self.config.jira_email and self.config.jira_token):
            raise JiraAPIError(
                "Missing required environment variables: JIRA_URL, JIRA_EMAIL, JIRA_API_TOKEN"
            )

    @property
    def base_url(self) -> str:
        if self.config.jira_cloud_id:
            return f"https://api.atlassian.com/ex/jira/{self.config.jira_cloud_id}"
        return (self.config.jira_url or "").rstrip("/")

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._validate_config()
            session = requests.Session()
            session.auth = (self.config.jira_email, self.config.jira_token)
            session.headers.update({
                "Accept": "application/json",
                "Content-Type": "application/json",
            })
            self._session = session
        return self._session

    @staticmethod
    def _is_retryable(error: requests.exceptions.RequestException) -> bool:
        response = error.response
        if response is None:
            return True
        return response.status_code == 429 or 500 <= response.status_code < 600

    @staticmethod
    def _format_error(error: requests.exceptions.RequestException) -> JiraAPIError:
        response = error.response
        if response is None:
            if isinstance(error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
                return JiraAPIError(
                    "No response from Jira API - check network connection and JIRA_URL"
                )
            return JiraAPIError(f"Request error: {error}")

        status = response.status_code
        if status in ERROR_MESSAGES:
            return JiraAPIError(ERROR_MESSAGES[status], status)

        try:
            data = response.json()
        except ValueError:
            data = None

        message = "Unknown error"
        if isinstance(data, dict):
            if data.get("errorMessages"):
                message = data["errorMessages"][0]
            elif data.get("message"):
                message = data["message"]

        return JiraAPIError(f"Jira API error ({status}): {message}", status)

    def _request(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """GET an endpoint, retrying transient failures with exponential backoff."""
        attempt = 0
        while True:
            try:
                response = self.session.get(
                    f"{self.base_url}{endpoint}",
                    params=params,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return response.json()
            except requests.exceptions.RequestException as e:
                if not (self._is_retryable(e) and attempt < self.max_retries):
                    raise self._format_error(e) from e

                delay = self.retry_delay * (2 ** attempt)
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{self.max_retries}), "
                    f"retrying in {delay}s... Error: {e}"
                )
                time.sleep(delay)
                attempt += 1

    def search(self, jql: str) -> list:
        """Fetch every issue matching a JQL query, following nextPageToken."""
        if jql in self._search_cache:
            return self._search_cache[jql]

        all_issues = []
        next_page_token = None

        while True:
            params = {
                "jql": jql,
                "maxResults": str(self.max_results),
                "fields": "*all",
            }
            if next_page_token:
                params["nextPageToken"] = next_page_token

            data = self._request(self.SEARCH_ENDPOINT, params=params)
            issues = data.get("issues") or []
            all_issues.extend(issues)
            next_page_token = data.get("nextPageToken")

            if not issues and next_page_token:
                logger.warning("Empty page with nextPageToken, stopping")
                break

            if data.get("isLast") or not next_page_token:
                break

        self._search_cache[jql] = all_issues
        return all_issues

    def fetch_issues_by_filter(self, filter_id) -> list:
        """Fetch all non-Epic issues of a saved Jira filter.

        Raises:
            ValueError: If filter_id is not a positive integer
            JiraAPIError: If Jira rejects the request
        """
        try:
            filter_num = int(filter_id)
        except (TypeError, ValueError):
            filter_num = 0
        if filter_num <= 0:
            raise ValueError(f"Invalid filter ID: {filter_id}. Must be a positive number.")

        issues = self.search(f"filter={filter_num} AND type != Epic")
        logger.info(f"Fetched {len(issues)} issues from filter {filter_num}")
        return issues
