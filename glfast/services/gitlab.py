"""GitLab REST API (v4) client implementing ``RepositoryHost``."""
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from glfast.core.logger import get_logger
from glfast.core.retry import RetryPolicy, retry
from glfast.models.config import DEFAULT_GITLAB_URL, GitLabSettings
from glfast.scaffold.manifest import Manifest
from glfast.services.host import RepositoryHost

logger = get_logger(__name__)

PER_PAGE = 100


class GitLabError(Exception):
    """Raised when GitLab rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)


def _retry_transient(exc: BaseException) -> bool:
    if isinstance(exc, GitLabError):
        return exc.status_code is None or exc.status_code >= 500
    return True


DOWNLOAD_RETRY = RetryPolicy(
    max_attempts=3,
    delay=1.0,
    exceptions=(GitLabError,),
    should_retry=_retry_transient,
)


def _project_id(project_path: str) -> str:
    """Encode ``group/name`` for use as the ``:id`` URL segment."""
    return quote(project_path, safe="")


class GitLabClient(RepositoryHost):
    """Talks to a GitLab instance with a personal access token.

    Args:
        token: Personal access token with ``api`` scope
        base_url: Instance URL, e.g. ``https://gitlab.example.com``
        timeout: Per-request timeout in seconds
        session: Preconfigured ``requests.Session`` (tests inject fakes)
        download_retry: Retry policy for archive downloads
    """

    def __init__(
        self,
        token: Optional[str],
        base_url: str = DEFAULT_GITLAB_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        download_retry: RetryPolicy = DOWNLOAD_RETRY,
    ):
        if not token:
            raise GitLabError("empty gitlab token provided")
        self.base_url = (base_url or DEFAULT_GITLAB_URL).rstrip("/")
        self.api_url = f"{self.base_url}/api/v4"
        self.timeout = timeout
        self.download_retry = download_retry
        self._session = session or requests.Session()
        self._session.headers.update({"PRIVATE-TOKEN": token})

    @classmethod
    def from_settings(cls, settings: GitLabSettings, **kwargs) -> "GitLabClient":
        return cls(settings.token, base_url=settings.baseurl, timeout=settings.timeout, **kwargs)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.api_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GitLabError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise GitLabError(f"{method} {path} failed: {self._error_message(response)}",
                              response.status_code)
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text.strip() or response.reason or "unknown error"
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error") or payload
            return str(message)
        return str(payload)

    def _get_all(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """GET every page of a list endpoint."""
        items: List[Dict[str, Any]] = []
        page: Optional[str] = "1"
        while page:
            query = dict(params or {}, per_page=PER_PAGE, page=page)
            response = self._request("GET", path, params=query)
            payload = response.json()
            if isinstance(payload, list):
                items.extend(payload)
            page = response.headers.get("X-Next-Page") or None
        return items

    def _group_id(self, group: str) -> int:
        for candidate in self._get_all("/groups", {"search": group.rsplit("/", 1)[-1]}):
            if candidate.get("full_path") == group:
                return candidate["id"]
        raise GitLabError(f"group {group} not found")

    def list_group_projects(self, group: str) -> Dict[str, str]:
        group_id = self._group_id(group)
        projects = self._get_all(f"/groups/{group_id}/projects", {"include_subgroups": "false"})
        return {project["name"]: project.get("description") or "" for project in projects}

    def project_exists(self, project_path: str) -> bool:
        try:
            self._request("GET", f"/projects/{_project_id(project_path)}")
        except GitLabError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    def get_project_archive(self, project_path: str) -> bytes:
        @retry(self.download_retry)
        def download() -> bytes:
            response = self._request(
                "GET",
                f"/projects/{_project_id(project_path)}/repository/archive.tar.gz",
            )
            return response.content

        data = download()
        logger.debug(f"Downloaded {len(data)} bytes of {project_path}")
        return data

    def create_project(self, name: str, group: str, description: str) -> None:
        payload = {
            "name": name,
            "path": name,
            "description": description,
            "namespace_id": self._group_id(group),
            "visibility": "private",
        }
        self._request("POST", "/projects", json=payload)
        logger.info(f"Created project {group}/{name}")

    def copy_project_variables(self, source: str, target: str) -> int:
        variables = self._get_all(f"/projects/{_project_id(source)}/variables")
        if not variables:
            logger.info(f"No variables found in source project {source}")
            return 0

        copied = 0
        for variable in variables:
            payload = {
                "key": variable["key"],
                "value": variable.get("value", ""),
                "protected": variable.get("protected", False),
                "masked": variable.get("masked", False),
                "environment_scope": variable.get("environment_scope", "*"),
            }
            if variable.get("variable_type"):
                payload["variable_type"] = variable["variable_type"]
            try:
                self._request("POST", f"/projects/{_project_id(target)}/variables", json=payload)
            except GitLabError as exc:
                logger.warning(f"Failed to copy variable {variable['key']} to {target}: {exc}")
                continue
            copied += 1
            logger.info(f"Variable {variable['key']} copied to {target}")
        return copied

    def enable_runners(self, source: str, target: str) -> int:
        runners = self._get_all(f"/projects/{_project_id(source)}/runners")
        enabled = 0
        for runner in runners:
            if runner.get("is_shared"):
                continue
            try:
                self._request(
                    "POST",
                    f"/projects/{_project_id(target)}/runners",
                    json={"runner_id": runner["id"]},
                )
            except GitLabError as exc:
                logger.warning(f"Failed to enable runner {runner['id']} for {target}: {exc}")
                continue
            enabled += 1
            logger.info(f"Runner {runner['id']} enabled for {target}")
        return enabled

    def create_commit(self, project_path: str, manifest: Manifest, branch: str, message: str) -> None:
        payload = {
            "branch": branch,
            "commit_message": message,
            "actions": manifest.to_commit_actions(),
        }
        self._request("POST", f"/projects/{_project_id(project_path)}/repository/commits", json=payload)
        logger.info(f"Committed {len(manifest)} files to {project_path}@{branch}")

    def create_branch(self, project_path: str, branch: str, ref: str) -> None:
        self._request(
            "POST",
            f"/projects/{_project_id(project_path)}/repository/branches",
            params={"branch": branch, "ref": ref},
        )

    def set_default_branch(self, project_path: str, branch: str) -> None:
        self._request("PUT", f"/projects/{_project_id(project_path)}", json={"default_branch": branch})

    def delete_project(self, project_path: str) -> None:
        self._request("DELETE", f"/projects/{_project_id(project_path)}")
        logger.info(f"Deleted project {project_path}")
