"""Celery worker responsible for rationale enrichment tasks.

Start the pool with ``celery -A outfit_reco.workers.enrichment_worker worker``.
"""

from __future__ import annotations

from functools import lru_cache

from celery import Celery, signals
from celery.utils.time import get_exponential_backoff_interval
from redis import Redis

from outfit_reco.cache.store import RationaleCache, create_redis
from outfit_reco.config.settings import get_settings
from outfit_reco.errors import ProviderError
from outfit_reco.monitoring.logging import configure_logging
from outfit_reco.nlp.providers import ProviderConfig, build_provider
from outfit_reco.workers.jobs import EnrichmentJob, JobState
from outfit_reco.workers.queue import JobStore
from outfit_reco.workers.rationale_worker import EnrichmentWorker, exhaust_job, record_failure

QUEUE_NAME = "ai-explanations"
MAX_BACKOFF_SECONDS = 600

settings = get_settings()

celery_app = Celery(
    "enrichment_worker",
    broker=settings.redis_url,
    backend=settings.redis_url,
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_acks_late=True,
    task_default_queue=QUEUE_NAME,
    worker_concurrency=settings.worker_concurrency,
    worker_prefetch_multiplier=1,
    result_expires=60 * 60,
)


@signals.setup_logging.connect
def _setup_logging(**_: object) -> None:
    configure_logging(settings.log_level)


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    return create_redis(settings.redis_url)


@lru_cache(maxsize=1)
def get_job_store() -> JobStore:
    return JobStore(get_redis(), settings.job_marker_ttl_seconds)


@lru_cache(maxsize=1)
def get_worker() -> EnrichmentWorker:
    """Build the worker once per process from the configured provider.

    A failed build is not cached, so the next attempt tries again.
    """

    return EnrichmentWorker(
        build_provider(ProviderConfig.from_settings(settings)),
        RationaleCache(get_redis(), settings.rationale_ttl_seconds),
        get_job_store(),
        max_retries=settings.enrichment_max_retries,
    )


@celery_app.task(
    bind=True,
    name="outfit_reco.explain_outfit",
    max_retries=settings.enrichment_max_retries,
)
def explain_outfit_task(self, payload: dict) -> dict:
    """Entry point that generates and stores rationale for one outfit."""

    job = EnrichmentJob.model_validate(payload)
    retries = self.request.retries
    try:
        worker = get_worker()
    except ProviderError as exc:
        outcome = record_failure(
            get_job_store(),
            job.reco_id,
            exc,
            retries=retries,
            max_retries=settings.enrichment_max_retries,
        )
    except Exception as exc:
        exhaust_job(get_job_store(), job.reco_id, exc, attempts=retries + 1)
        raise
    else:
        outcome = worker.process(job, retries=retries)

    if outcome.state is JobState.RETRY_SCHEDULED:
        countdown = get_exponential_backoff_interval(
            factor=settings.enrichment_retry_backoff,
            retries=retries,
            maximum=MAX_BACKOFF_SECONDS,
            full_jitter=True,
        )
        raise self.retry(exc=outcome.error, countdown=countdown)
    return {"reco_id": job.reco_id, "state": outcome.state.value}


def dispatch_enrichment(job: EnrichmentJob) -> None:
    """Send ``job`` to the broker using its fingerprint as task id."""

    explain_outfit_task.apply_async(args=[job.model_dump(mode="json")], task_id=job.reco_id)
