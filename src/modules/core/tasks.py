"""Tasks assíncronas do módulo core."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

RELAY_BATCH_SIZE = 100
MAX_RELAY_RETRIES = 5


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int = RELAY_BATCH_SIZE) -> dict:
    """Publica eventos pendentes do outbox no barramento em memória.

    Cada evento é processado na sua própria transação: uma falha marca
    apenas aquele evento como ``FAILED`` e ele volta a ser tentado até
    ``MAX_RELAY_RETRIES`` vezes.
    """
    pending_ids = list(
        OutboxEvent.objects.filter(
            status__in=[EventStatus.PENDING, EventStatus.FAILED],
            retry_count__lt=MAX_RELAY_RETRIES,
        )
        .order_by("created_at")
        .values_list("id", flat=True)[:batch_size]
    )

    published = failed = 0
    for event_id in pending_ids:
        with transaction.atomic():
            outbox_event = (
                OutboxEvent.objects.select_for_update().filter(id=event_id).first()
            )
            if outbox_event is None or outbox_event.status == EventStatus.PUBLISHED:
                continue
            log = logger.bind(
                outbox_event_id=str(outbox_event.id),
                event_type=outbox_event.event_type,
            )
            try:
                event = DomainEvent.from_payload(
                    outbox_event.event_type, outbox_event.payload
                )
                event_bus.publish(event)
            except Exception as exc:
                outbox_event.mark_as_failed(str(exc))
                log.warning("outbox.relay_failed", error=str(exc))
                failed += 1
                continue
            outbox_event.mark_as_published()
            log.info("outbox.relayed")
            published += 1

    logger.info("outbox.relay_finished", published=published, failed=failed)
    return {"published": published, "failed": failed}
