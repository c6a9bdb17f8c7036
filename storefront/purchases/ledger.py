"""
Processed-webhook ledger.

Each settled checkout session leaves exactly one ``ProcessedWebhook`` row. The
row's primary key is the session id, so the database rejects a second marker
for the same session even when two deliveries race past the read check.
"""

import logging

from django.db import IntegrityError, transaction

from core.exceptions import DuplicateSettlement
from .models import ProcessedWebhook

logger = logging.getLogger(__name__)


class WebhookLedger:
    def is_processed(self, session_id: str) -> bool:
        return ProcessedWebhook.objects.filter(pk=session_id).exists()

    def mark_processed(self, session_id: str, event_type: str) -> ProcessedWebhook:
        """
        Raises:
            DuplicateSettlement: a marker for ``session_id`` already exists
        """
        try:
            with transaction.atomic():
                return ProcessedWebhook.objects.create(id=session_id, event_type=event_type)
        except IntegrityError as exc:
            logger.error("Duplicate settlement of checkout session %s rejected", session_id)
            raise DuplicateSettlement(details={"sessionId": session_id}) from exc
