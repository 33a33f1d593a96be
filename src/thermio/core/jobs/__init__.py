"""Background job processing with ARQ.

The worker runs the hourly compliance pass and account expiry; the API
process only holds a pool for queueing manual runs of those jobs.
"""

from thermio.core.jobs.registry import (
    SCHEDULED_JOBS,
    close_queue,
    enqueue,
    get_queue,
    open_queue,
    trigger_scheduled_job,
)


__all__ = [
    "SCHEDULED_JOBS",
    "close_queue",
    "enqueue",
    "get_queue",
    "open_queue",
    "trigger_scheduled_job",
]
