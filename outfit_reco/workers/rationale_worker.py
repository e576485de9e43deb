"""Rationale generation for a single enrichment job."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from outfit_reco.cache.store import RationaleCache
from outfit_reco.errors import ProviderError, RationaleValidationError
from outfit_reco.metrics.prometheus_exporter import enrichment_jobs_total
from outfit_reco.nlp.prompt_builder import PromptBuilder
from outfit_reco.nlp.providers import TextGenerationProvider
from outfit_reco.nlp.response_parser import validate_rationale
from outfit_reco.workers.jobs import EnrichmentJob, JobState
from outfit_reco.workers.queue import JobStore

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (ProviderError, RationaleValidationError)


@dataclass(slots=True)
class JobOutcome:
    state: JobState
    error: Exception | None = None


def exhaust_job(job_store: JobStore, fingerprint: str, error: Exception, *, attempts: int) -> JobOutcome:
    """Drop the job marker and report the job as ``exhausted``."""

    job_store.release(fingerprint)
    enrichment_jobs_total.labels(state=JobState.EXHAUSTED.value).inc()
    logger.error("Enrichment job %s exhausted after %d attempts: %s", fingerprint, attempts, error)
    return JobOutcome(JobState.EXHAUSTED, error)


def record_failure(
    job_store: JobStore,
    fingerprint: str,
    error: Exception,
    *,
    retries: int,
    max_retries: int,
) -> JobOutcome:
    """Schedule another attempt for a retryable failure, or exhaust the job."""

    if retries >= max_retries:
        return exhaust_job(job_store, fingerprint, error, attempts=retries + 1)

    job_store.set_state(fingerprint, JobState.RETRY_SCHEDULED)
    enrichment_jobs_total.labels(state=JobState.RETRY_SCHEDULED.value).inc()
    logger.warning("Enrichment job %s attempt %d failed, will retry: %s", fingerprint, retries + 1, error)
    return JobOutcome(JobState.RETRY_SCHEDULED, error)


class EnrichmentWorker:
    """Builds the prompt, calls the provider and stores a validated rationale.

    Nothing is written to the rationale cache unless validation passes; failed
    attempts are reported as ``retry_scheduled`` until the retry budget is spent.
    Any other error exhausts the job and propagates.
    """

    def __init__(
        self,
        provider: TextGenerationProvider,
        rationale_cache: RationaleCache,
        job_store: JobStore,
        *,
        max_retries: int = 3,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._provider = provider
        self._rationale_cache = rationale_cache
        self._job_store = job_store
        self._max_retries = max_retries
        self._prompt_builder = prompt_builder or PromptBuilder()

    def process(self, job: EnrichmentJob, *, retries: int = 0) -> JobOutcome:
        """Run one attempt; ``retries`` is the number of attempts already made."""

        fingerprint = job.reco_id
        started = time.perf_counter()

        try:
            self._job_store.set_state(fingerprint, JobState.PROCESSING)
            raw = self._provider.generate(self._prompt_builder.build(job))
            rationale = validate_rationale(raw)
            self._rationale_cache.put(fingerprint, rationale)
        except RETRYABLE_ERRORS as exc:
            return record_failure(
                self._job_store,
                fingerprint,
                exc,
                retries=retries,
                max_retries=self._max_retries,
            )
        except Exception as exc:
            exhaust_job(self._job_store, fingerprint, exc, attempts=retries + 1)
            raise

        self._job_store.release(fingerprint)
        enrichment_jobs_total.labels(state=JobState.STORED.value).inc()
        logger.info(
            "Enrichment job %s stored via %s in %.0f ms",
            fingerprint,
            self._provider.name,
            (time.perf_counter() - started) * 1000,
        )
        return JobOutcome(JobState.STORED)
