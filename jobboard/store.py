"""
Optimistic state container for jobs, comments and replies.

Every mutation goes through JobStore. Comments and replies are merged into
the in-memory view before the backend is asked, then reconciled against
its answer. Job create/update/delete only apply once the backend confirms.
Every mutation ends in exactly one notice.

Threads may share a store: merges run under one state lock, and each
merge-call-reconcile sequence is serialized per job id so mutations on the
same job apply in the order they were issued.
"""

import threading
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .cache import JobCache
from .errors import TransportError, ValidationError
from .gateway import JobGateway
from .logger import StructuredLogger, get_logger
from .models import Comment, Job, Reply, UserInfo, make_temp_comment, make_temp_reply
from .notify import Notifier
from .views import JobViews

Jobs = Tuple[Job, ...]


def _map_job(jobs: Jobs, job_id: str, fn: Callable[[Job], Job]) -> Jobs:
    return tuple(fn(job) if job.id == job_id else job for job in jobs)


def _swap(items: tuple, old: Any, new: Any) -> tuple:
    """Replace the element that *is* old with new, keeping its position."""
    for i, item in enumerate(items):
        if item is old:
            return items[:i] + (new,) + items[i + 1:]
    return items


def _append_reply(job: Job, comment_id: str, reply: Reply) -> Job:
    comments = tuple(
        replace(c, replies=c.replies + (reply,)) if c.id == comment_id else c
        for c in job.comments
    )
    return replace(job, comments=comments)


def _swap_reply(job: Job, temp: Reply, reply: Reply) -> Job:
    # The parent comment may itself have been reconciled since, so look by identity
    comments = tuple(
        replace(c, replies=_swap(c.replies, temp, reply))
        if any(r is temp for r in c.replies) else c
        for c in job.comments
    )
    return replace(job, comments=comments)


class JobStore:
    def __init__(
        self,
        gateway: JobGateway,
        cache: JobCache,
        notifier: Optional[Notifier] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.gateway = gateway
        self.cache = cache
        self.logger = logger or get_logger()
        self.notifier = notifier or Notifier(logger=self.logger)
        self._views = JobViews()
        self._loading = False
        self._state_lock = threading.RLock()
        self._locks_guard = threading.Lock()
        self._job_locks: Dict[str, threading.Lock] = {}

    # Read side

    @property
    def jobs(self) -> Jobs:
        with self._state_lock:
            return self._views.jobs

    @property
    def user_jobs(self) -> Jobs:
        with self._state_lock:
            return self._views.user_jobs

    @property
    def filtered_jobs(self) -> Jobs:
        with self._state_lock:
            return self._views.filtered_jobs

    @property
    def popular_jobs(self) -> Jobs:
        with self._state_lock:
            return self._views.popular_jobs

    @property
    def saved_jobs(self) -> Jobs:
        with self._state_lock:
            return self._views.saved_jobs

    @property
    def loading(self) -> bool:
        return self._loading

    def get_job_by_id(self, job_id: str) -> Optional[Job]:
        with self._state_lock:
            return self._views.find(job_id)

    def set_filtered_jobs(self, jobs: Iterable[Job]) -> None:
        with self._state_lock:
            self._views.set_filtered(jobs)

    def search(self, query: str) -> Jobs:
        """Filter jobs by a case-insensitive match on title, description or category."""
        needle = (query or "").strip().lower()
        with self._state_lock:
            if not needle:
                self._views.clear_filter()
            else:
                self._views.set_filtered(
                    j for j in self._views.jobs
                    if needle in j.title.lower()
                    or needle in j.description.lower()
                    or needle in j.category.lower()
                )
            return self._views.filtered_jobs

    # Internals

    def _job_lock(self, job_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._job_locks.get(job_id)
            if lock is None:
                lock = self._job_locks[job_id] = threading.Lock()
            return lock

    def _merge(self, fn: Callable[[Jobs], Jobs]) -> None:
        with self._state_lock:
            self._views.apply(fn(self._views.jobs))

    # Fetching

    def refresh_jobs(self, user: Optional[UserInfo] = None) -> Jobs:
        """Reload every view from the backend, falling back to the cached snapshot."""
        self._loading = True
        try:
            try:
                jobs = self.gateway.list_jobs()
            except TransportError as e:
                self.notifier.error("Error", f"Could not load jobs: {e}")
                cached = self.cache.load()
                if cached is not None:
                    self.logger.info("Using cached jobs", count=len(cached))
                    jobs = cached
                else:
                    self.logger.warning("No cached jobs available")
                    jobs = []
            else:
                self.cache.save(jobs)

            with self._state_lock:
                self._views.reset(jobs, user.id if user else None)
                return self._views.jobs
        finally:
            self._loading = False

    def fetch_job(self, job_id: str) -> Optional[Job]:
        """Fetch one job from the backend and refresh the local copy."""
        try:
            job = self.gateway.get_job(job_id)
        except TransportError as e:
            self.notifier.error("Error", f"Could not load the job: {e}")
            return self.get_job_by_id(job_id)
        self._merge(lambda jobs: _map_job(jobs, job_id, lambda _: job))
        return job

    # Jobs

    def create_job(self, fields: Dict[str, Any], user: Optional[UserInfo] = None) -> Optional[Job]:
        try:
            job = self.gateway.create_job(fields)
        except ValidationError as e:
            self.notifier.error("Error", str(e))
            return None
        except TransportError as e:
            self.notifier.error("Error", f"Could not create the job: {e}")
            return None

        if not job.user_id and user is not None:
            job = replace(job, user_id=user.id)
        # Newest first
        self._merge(lambda jobs: (job,) + tuple(j for j in jobs if j.id != job.id))
        self.notifier.success("Job created", "The job was created successfully.")
        return job

    def update_job(self, job_id: str, fields: Dict[str, Any]) -> Optional[Job]:
        with self._job_lock(job_id):
            try:
                server_job = self.gateway.update_job(job_id, fields)
            except TransportError as e:
                self.notifier.error("Error", f"Could not update the job: {e}")
                return None

            scalars = {name: getattr(server_job, name) for name in Job.SCALAR_FIELDS}
            self._merge(lambda jobs: _map_job(jobs, job_id, lambda j: replace(j, **scalars)))
            updated = self.get_job_by_id(job_id) or server_job
            self.notifier.success("Job updated", "The job was updated successfully.")
            return updated

    def delete_job(self, job_id: str) -> bool:
        with self._job_lock(job_id):
            try:
                ok = self.gateway.delete_job(job_id)
            except TransportError as e:
                self.notifier.error("Error", f"Could not delete the job: {e}")
                return False
            if not ok:
                self.notifier.error("Error", "The server refused to delete the job.")
                return False

            self._merge(lambda jobs: tuple(j for j in jobs if j.id != job_id))
            self.notifier.success("Job deleted", "The job was deleted successfully.")
            return True

    # Comments and replies

    def add_comment(self, job_id: str, text: str, user: Optional[UserInfo]) -> Optional[Comment]:
        """Show a comment immediately, then confirm it with the backend.

        Returns the server comment, or the temporary one when the backend
        could not be reached; a failed comment is kept, never discarded.
        """
        if user is None:
            self.notifier.error("Error", "You must be signed in to comment.")
            return None

        temp = make_temp_comment(job_id, text, user)
        with self._job_lock(job_id):
            self._merge(lambda jobs: _map_job(
                jobs, job_id, lambda j: replace(j, comments=j.comments + (temp,))))

            try:
                comment = self.gateway.add_comment(job_id, text)
            except TransportError as e:
                self.logger.record_optimistic(reconciled=False)
                self.logger.warning("Comment kept locally", job_id=job_id, temp_id=temp.id, error=str(e))
                self.notifier.error(
                    "Error",
                    "Could not publish the comment on the server, it is only shown locally.",
                )
                return temp

            self._merge(lambda jobs: _map_job(
                jobs, job_id, lambda j: replace(j, comments=_swap(j.comments, temp, comment))))
            self.logger.record_optimistic(reconciled=True)
            self.logger.debug("Comment reconciled", temp_id=temp.id, comment_id=comment.id)
            self.notifier.success("Comment published", "Your comment was published successfully.")
            return comment

    def add_reply(self, comment_id: str, job_id: str, text: str, user: Optional[UserInfo]) -> Optional[Reply]:
        if user is None:
            self.notifier.error("Error", "You must be signed in to reply.")
            return None

        temp = make_temp_reply(comment_id, text, user)
        with self._job_lock(job_id):
            self._merge(lambda jobs: _map_job(jobs, job_id, lambda j: _append_reply(j, comment_id, temp)))

            try:
                reply = self.gateway.add_reply(comment_id, text)
            except TransportError as e:
                self.logger.record_optimistic(reconciled=False)
                self.logger.warning("Reply kept locally", comment_id=comment_id, temp_id=temp.id, error=str(e))
                self.notifier.error(
                    "Error",
                    "Could not publish the reply on the server, it is only shown locally.",
                )
                return temp

            self._merge(lambda jobs: _map_job(jobs, job_id, lambda j: _swap_reply(j, temp, reply)))
            self.logger.record_optimistic(reconciled=True)
            self.notifier.success("Reply published", "Your reply was published successfully.")
            return reply

    def add_reply_to_comment(self, job_id: str, comment_id: str, text: str, user: Optional[UserInfo]) -> None:
        self.add_reply(comment_id, job_id, text, user)

    def delete_comment(self, comment_id: str) -> bool:
        """Delete a comment once the backend confirms, sweeping every job."""
        try:
            ok = self.gateway.delete_comment(comment_id)
        except TransportError as e:
            self.notifier.error("Error", f"Could not delete the comment: {e}")
            return False
        if not ok:
            self.notifier.error("Error", "The server refused to delete the comment.")
            return False

        self._merge(lambda jobs: tuple(
            replace(j, comments=tuple(c for c in j.comments if c.id != comment_id))
            if any(c.id == comment_id for c in j.comments) else j
            for j in jobs
        ))
        self.notifier.success("Comment deleted", "The comment was deleted successfully.")
        return True

    # Saved jobs

    def save_job(self, job_id: str) -> None:
        self.notifier.info("Not available yet", "Saving jobs will be available soon.")

    def unsave_job(self, job_id: str) -> None:
        self.notifier.info("Not available yet", "Removing saved jobs will be available soon.")
