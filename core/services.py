import logging

from django.contrib.contenttypes.models import ContentType

from .models import DomainActivity

logger = logging.getLogger("teamforge.core")


class ActivityService:
    @staticmethod
    def log_activity(actor, verb, target, event=None, metadata=None):
        """
        Logs a domain activity.

        Called inside the caller's transaction so the ledger row commits or
        rolls back together with the change it describes.
        """
        if metadata is None:
            metadata = {}

        activity = DomainActivity.objects.create(
            actor=actor,
            verb=verb,
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
            event=event,
            metadata=metadata,
        )
        logger.debug(f"Activity logged: {verb} by user={actor.pk} on {target.__class__.__name__}={target.pk}")
        return activity
