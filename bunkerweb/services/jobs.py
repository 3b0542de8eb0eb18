"""
Scheduler jobs.
"""

from __future__ import annotations

import builtins
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..exceptions import ValidationError
from ..models.entities import Job, JobItem, JobsPayload

if TYPE_CHECKING:
    from ..clients.http import HTTPClient


class JobService:
    def __init__(self, client: HTTPClient):
        self._client = client

    def list(self) -> builtins.list[Job]:
        payload = self._client.get("jobs", shape=JobsPayload)
        if payload is None:
            return []
        return payload.jobs or []

    def run(self, jobs: Iterable[JobItem]) -> None:
        """
        Trigger jobs immediately.

        A `JobItem` without a name runs every job of its plugin. At least one
        item is required.
        """
        items = [job.to_payload() for job in jobs]
        if not items:
            raise ValidationError("At least one job is required", field="jobs")
        self._client.post("jobs/run", json={"jobs": items})
