"""
Remote gateway for the job board backend.

Stateless request/response wrappers. Every call sends a bearer token when
one is available, every failure surfaces as TransportError, and nothing is
retried or cached here.
"""

from typing import Any, Callable, Dict, List, Optional

import requests

from .config import DEFAULT_API_URL
from .errors import TransportError
from .logger import StructuredLogger, get_logger
from .models import Comment, Job, Reply
from .schema import create_payload, require_valid_job, update_payload

TokenProvider = Callable[[], Optional[str]]


def _server_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        return body.get("message") or body.get("details")
    return None


class JobGateway:
    """Thin client for the /jobs and /comments routes."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or get_logger()

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider()
        # A missing token is not an error; the server decides
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, what: str, json: Optional[dict] = None) -> Dict[str, Any]:
        """Issue a request and return the decoded body.

        Raises:
            TransportError: On HTTP errors, timeouts, bad bodies or success=false
        """
        url = f"{self.base_url}{path}"
        self.logger.record_api_call()
        self.logger.debug(f"{method} {what}", url=url)
        try:
            resp = self.session.request(method, url, json=json, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            detail = None
            if e.response is not None:
                try:
                    detail = _server_message(e.response.json())
                except ValueError:
                    detail = None
            self.logger.record_api_failure(f"HTTPError_{status}")
            self.logger.error(f"Failed to {what}", url=url, status=status, detail=detail)
            raise TransportError(f"Failed to {what} ({status}): {detail or e}", status_code=status)
        except requests.exceptions.Timeout:
            self.logger.record_api_failure("Timeout")
            self.logger.warning(f"Timed out trying to {what}", url=url)
            raise TransportError(f"Failed to {what}: request timed out. Try again later.")
        except requests.exceptions.RequestException as e:
            self.logger.record_api_failure("RequestException")
            self.logger.error(f"Request error trying to {what}", url=url, error=str(e))
            raise TransportError(f"Failed to {what}: {e}")

        try:
            body = resp.json()
        except ValueError:
            self.logger.record_api_failure("InvalidBody")
            self.logger.error(f"Non-JSON response trying to {what}", url=url, status=resp.status_code)
            raise TransportError(f"Failed to {what}: invalid response from server", status_code=resp.status_code)
        if not isinstance(body, dict):
            self.logger.record_api_failure("InvalidBody")
            raise TransportError(f"Failed to {what}: invalid response from server", status_code=resp.status_code)
        return body

    def _require_success(self, body: Dict[str, Any], what: str, key: str, kind: type = dict) -> Any:
        if not body.get("success") or body.get(key) is None:
            message = _server_message(body) or f"Failed to {what}"
            self.logger.record_api_failure("Unsuccessful")
            self.logger.warning("Backend answered without success", action=what, server_message=message)
            raise TransportError(message)
        value = body[key]
        if not isinstance(value, kind) or (kind is list and not all(isinstance(v, dict) for v in value)):
            self.logger.record_api_failure("InvalidBody")
            self.logger.error(f"Malformed response trying to {what}", key=key, got=type(value).__name__)
            raise TransportError(f"Failed to {what}: invalid response from server")
        return value

    # Jobs

    def list_jobs(self) -> List[Job]:
        body = self._request("GET", "/jobs", "fetch jobs")
        jobs = self._require_success(body, "fetch jobs", "jobs", list)
        return [Job.from_dict(j) for j in jobs]

    def get_job(self, job_id: str) -> Job:
        body = self._request("GET", f"/jobs/{job_id}", "fetch job")
        return Job.from_dict(self._require_success(body, "fetch job", "job"))

    def list_jobs_by_user(self, user_id: str) -> List[Job]:
        # The backend has no per-user route
        return [j for j in self.list_jobs() if j.user_id == user_id]

    def create_job(self, fields: Dict[str, Any]) -> Job:
        """Create a job. Validation runs before any request is made.

        Raises:
            ValidationError: If title, description, category or budget is missing
            TransportError: On any backend failure
        """
        require_valid_job(fields)
        body = self._request("POST", "/jobs", "create job", json=create_payload(fields))
        return Job.from_dict(self._require_success(body, "create job", "job"))

    def update_job(self, job_id: str, fields: Dict[str, Any]) -> Job:
        body = self._request("PUT", f"/jobs/{job_id}", "update job", json=update_payload(fields))
        return Job.from_dict(self._require_success(body, "update job", "job"))

    def delete_job(self, job_id: str) -> bool:
        body = self._request("DELETE", f"/jobs/{job_id}", "delete job")
        return bool(body.get("success"))

    # Comments and replies

    def add_comment(self, job_id: str, text: str) -> Comment:
        body = self._request("POST", f"/jobs/{job_id}/comments", "add comment", json={"text": text})
        return Comment.from_dict(self._require_success(body, "add comment", "comment"))

    def add_reply(self, comment_id: str, text: str) -> Reply:
        body = self._request("POST", f"/comments/{comment_id}/replies", "add reply", json={"text": text})
        return Reply.from_dict(self._require_success(body, "add reply", "reply"))

    def delete_comment(self, comment_id: str) -> bool:
        body = self._request("DELETE", f"/comments/{comment_id}", "delete comment")
        return bool(body.get("success"))
