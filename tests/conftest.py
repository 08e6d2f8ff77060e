"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List, Optional

import requests

from jobboard.cache import JsonFileCache
from jobboard.errors import TransportError
from jobboard.logger import get_logger, reset_logger
from jobboard.models import Comment, Job, Reply, UserInfo
from jobboard.notify import Notifier
from jobboard.schema import require_valid_job
from jobboard.store import JobStore


@pytest.fixture(autouse=True)
def logger(tmp_path):
    """Fresh global logger writing into the test's temp dir."""
    reset_logger()
    log = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield log
    reset_logger()


def make_job_dict(job_id: str, user_id: str = "u1", title: Optional[str] = None, **extra) -> Dict[str, Any]:
    data = {
        "id": job_id,
        "title": title or f"Job {job_id}",
        "description": f"Description of {job_id}",
        "category": "web",
        "budget": 500,
        "status": "open",
        "userId": user_id,
        "createdAt": "2024-05-01T10:00:00Z",
        "comments": [],
    }
    data.update(extra)
    return data


class FakeGateway:
    """In-memory stand-in for JobGateway.

    Set ``fail`` to make every call raise TransportError, or put a callable
    in ``hooks`` to run code (e.g. inspect the store) during a call.
    """

    def __init__(self, jobs: Optional[List[Dict[str, Any]]] = None):
        self.jobs = [Job.from_dict(j) for j in (jobs or [])]
        self.fail = False
        self.refuse = False
        self.calls: List[tuple] = []
        self.hooks: Dict[str, Any] = {}
        self._next = 100

    def _enter(self, name: str, *args):
        self.calls.append((name,) + args)
        hook = self.hooks.get(name)
        if hook is not None:
            hook(*args)
        if self.fail:
            raise TransportError(f"Failed to {name}: connection refused")

    def _new_id(self, prefix: str) -> str:
        self._next += 1
        return f"{prefix}{self._next}"

    def list_jobs(self):
        self._enter("list_jobs")
        return list(self.jobs)

    def get_job(self, job_id):
        self._enter("get_job", job_id)
        for j in self.jobs:
            if j.id == job_id:
                return j
        raise TransportError("Job not found", status_code=404)

    def list_jobs_by_user(self, user_id):
        return [j for j in self.list_jobs() if j.user_id == user_id]

    def create_job(self, fields):
        require_valid_job(fields)
        self._enter("create_job", fields)
        job = Job.from_dict({**fields, "id": self._new_id("job-"), "userId": fields.get("userId", "")})
        self.jobs.insert(0, job)
        return job

    def update_job(self, job_id, fields):
        self._enter("update_job", job_id, fields)
        for j in self.jobs:
            if j.id == job_id:
                # Server answers without the comment thread
                data = {**j.to_dict(), **fields}
                data.pop("comments")
                return Job.from_dict(data)
        raise TransportError("Job not found", status_code=404)

    def delete_job(self, job_id):
        self._enter("delete_job", job_id)
        return not self.refuse

    def add_comment(self, job_id, text):
        self._enter("add_comment", job_id, text)
        return Comment(id=self._new_id("c-"), job_id=job_id, user_id="u1", text=text, user_name="Ana")

    def add_reply(self, comment_id, text):
        self._enter("add_reply", comment_id, text)
        return Reply(id=self._new_id("r-"), comment_id=comment_id, user_id="u1", text=text, user_name="Ana")

    def delete_comment(self, comment_id):
        self._enter("delete_comment", comment_id)
        return not self.refuse


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._body = body
        self._text = text

    def json(self):
        if self._text is not None:
            raise ValueError(f"Expecting value: {self._text[:20]}")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "json": json, "headers": headers or {}, "timeout": timeout})
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def user() -> UserInfo:
    return UserInfo(id="u1", name="Ana", photo_url="https://example.com/ana.png")


@pytest.fixture
def job_dicts() -> List[Dict[str, Any]]:
    return [
        make_job_dict("A", "u1", title="Landing page"),
        make_job_dict("B", "u2", title="Mobile app"),
        make_job_dict("C", "u1", title="Logo design", category="design"),
        make_job_dict("D", "u3", title="Blog posts", category="writing"),
    ]


@pytest.fixture
def gateway(job_dicts) -> FakeGateway:
    return FakeGateway(job_dicts)


@pytest.fixture
def cache(tmp_path, logger) -> JsonFileCache:
    return JsonFileCache(tmp_path / "cache.json", logger=logger)


@pytest.fixture
def store(gateway, cache, logger) -> JobStore:
    return JobStore(gateway, cache, notifier=Notifier(logger=logger), logger=logger)


@pytest.fixture
def loaded_store(store, user) -> JobStore:
    """Store with jobs A-D loaded and the notice history cleared."""
    store.refresh_jobs(user)
    store.notifier.clear()
    return store
