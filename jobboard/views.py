"""
Derived views over the canonical job list.

All, the current user's, filtered, popular and saved. Views that are a
pure function of the canonical list are recomputed on every change. The
filtered view mirrors the canonical list until a filter is set from
outside; after that it is patched by job id.
"""

from typing import Iterable, Optional, Tuple

from .models import Job

POPULAR_COUNT = 3


class JobViews:
    def __init__(self):
        self.user_id: Optional[str] = None
        self.jobs: Tuple[Job, ...] = ()
        self.user_jobs: Tuple[Job, ...] = ()
        self.filtered_jobs: Tuple[Job, ...] = ()
        self.popular_jobs: Tuple[Job, ...] = ()
        # Saving jobs is not supported by the backend yet
        self.saved_jobs: Tuple[Job, ...] = ()
        self.filtering = False

    def reset(self, jobs: Iterable[Job], user_id: Optional[str] = None) -> None:
        """Replace the canonical list after a fetch; the filter is cleared."""
        self.user_id = user_id
        self.jobs = tuple(jobs)
        self.filtering = False
        self._recompute()

    def apply(self, jobs: Iterable[Job]) -> None:
        """Install a new canonical list and bring every view in line with it."""
        self.jobs = tuple(jobs)
        if self.filtering:
            by_id = {job.id: job for job in self.jobs}
            self.filtered_jobs = tuple(by_id[j.id] for j in self.filtered_jobs if j.id in by_id)
        self._recompute()

    def set_filtered(self, jobs: Iterable[Job]) -> None:
        # Take the canonical copies so later patches reach them
        by_id = {job.id: job for job in self.jobs}
        self.filtered_jobs = tuple(by_id[j.id] for j in jobs if j.id in by_id)
        self.filtering = True

    def clear_filter(self) -> None:
        self.filtering = False
        self.filtered_jobs = self.jobs

    def find(self, job_id: str) -> Optional[Job]:
        for job in self.jobs:
            if job.id == job_id:
                return job
        return None

    def _recompute(self) -> None:
        if self.user_id is None:
            self.user_jobs = ()
        else:
            self.user_jobs = tuple(j for j in self.jobs if j.user_id == self.user_id)
        if not self.filtering:
            self.filtered_jobs = self.jobs
        self.popular_jobs = self.jobs[:POPULAR_COUNT]
        self.saved_jobs = ()
