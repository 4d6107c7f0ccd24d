# events/models.py
from django.core.validators import MinValueValidator
from django.db import models


class Event(models.Model):
    """
    Read-only mirror of the event catalog.

    Event CRUD lives elsewhere; this subsystem only needs the id and the
    team-size limit.
    """
    title = models.CharField(max_length=255)
    team_capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Maximum team size including the leader. Empty = unbounded.",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                check=models.Q(team_capacity__isnull=True) | models.Q(team_capacity__gte=1),
                name='event_team_capacity_positive',
            ),
        ]
        indexes = [
            models.Index(fields=['created_at'], name='event_created_idx'),
        ]

    def __str__(self):
        return self.title
