# domains/shipments/tasks.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name="domains.shipments.tasks.poll_due_shipments", acks_late=True)
def poll_due_shipments(limit: Optional[int] = None) -> Dict[str, Any]:
    """
    Beat entry point (every 15 min): re-poll shipments whose next_poll_at is due.
    Per-record failures are already contained by the service.
    """
    from .services import reconcile_due_shipments

    summary = reconcile_due_shipments(limit=limit)
    logger.info("poll_due_shipments processed=%s", summary["processed"])
    return summary
