"""Idempotent enrichment queue keyed by outfit fingerprint."""

from __future__ import annotations

import logging
from typing import Callable

from kombu.exceptions import OperationalError
from redis import Redis, RedisError

from outfit_reco.cache.keys import job_key
from outfit_reco.metrics.prometheus_exporter import enrichment_jobs_total
from outfit_reco.workers.jobs import EnrichmentJob, JobState

logger = logging.getLogger(__name__)

# raised when the broker or the job store cannot be reached
DISPATCH_ERRORS = (OperationalError, RedisError, OSError)


class JobStore:
    """Per-fingerprint job markers holding the current :class:`JobState`.

    A marker exists only while a job is live; terminal states remove it.
    """

    def __init__(self, client: Redis, ttl_seconds: int = 60 * 60) -> None:
        self._client = client
        self._ttl = ttl_seconds

    def claim(self, fingerprint: str) -> bool:
        """Atomically create the marker; ``False`` if a job is already live."""

        return bool(
            self._client.set(job_key(fingerprint), JobState.QUEUED.value, nx=True, ex=self._ttl)
        )

    def set_state(self, fingerprint: str, state: JobState) -> None:
        self._client.set(job_key(fingerprint), state.value, ex=self._ttl, xx=True)

    def state(self, fingerprint: str) -> JobState | None:
        raw = self._client.get(job_key(fingerprint))
        return JobState(raw) if raw else None

    def release(self, fingerprint: str) -> None:
        self._client.delete(job_key(fingerprint))


class EnrichmentQueue:
    """Dispatches enrichment jobs at most once per live fingerprint."""

    def __init__(self, job_store: JobStore, dispatch: Callable[[EnrichmentJob], None]) -> None:
        self._job_store = job_store
        self._dispatch = dispatch

    def enqueue(self, job: EnrichmentJob) -> bool:
        """Queue ``job``; returns ``False`` when one is already in flight."""

        if not self._job_store.claim(job.reco_id):
            logger.debug("Enrichment job %s already queued", job.reco_id)
            return False

        try:
            self._dispatch(job)
        except DISPATCH_ERRORS:
            self._job_store.release(job.reco_id)
            raise

        enrichment_jobs_total.labels(state=JobState.QUEUED.value).inc()
        logger.debug("Enqueued enrichment job %s", job.reco_id)
        return True
