# events/catalog.py
"""
Event catalog seam: the only way team formation reads event metadata.
"""
from typing import Optional

from rest_framework.exceptions import NotFound

from .models import Event


class EventNotFound(NotFound):
    default_detail = "Event not found."
    default_code = "event_not_found"


def get_event(event_id) -> Event:
    try:
        return Event.objects.get(pk=event_id)
    except Event.DoesNotExist:
        raise EventNotFound()


def get_event_capacity(event_id) -> Optional[int]:
    """
    Team-size limit for the event, leader included. None means unbounded.
    """
    return get_event(event_id).team_capacity
