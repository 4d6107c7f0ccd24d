# teams/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q


class Team(models.Model):
    """
    Team Formation System

    A named group of participants competing together in one event.

    - The leader is set at creation and never changes; leaders delete
      the team instead of leaving it.
    - The leader also has a TeamMember row, so it counts toward capacity.
    - Fullness is never stored; it is computed against the event's
      team_capacity at read/decision time.
    """
    STATUS_ACTIVE = "active"
    STATUS_DELETED = "deleted"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_DELETED, "Deleted"),
    ]

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name='teams')
    leader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='led_teams',
    )
    name = models.CharField(max_length=100)
    bio = models.TextField(blank=True, default="")
    roles_required = models.JSONField(default=list, blank=True, help_text="Roles the team is looking for")

    # Project profile
    project_name = models.CharField(max_length=255, blank=True, default="")
    problem_statement = models.TextField(blank=True, default="")
    project_link = models.URLField(max_length=2048, blank=True, null=True)
    is_public = models.BooleanField(default=True, help_text="Private teams are only visible to their members")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['event', 'status'], name='team_event_status_idx'),
            models.Index(fields=['leader', 'status'], name='team_leader_status_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.event.title})"

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def capacity(self):
        return self.event.team_capacity

    @property
    def current_size(self):
        return self.members.count()

    @property
    def is_full(self):
        capacity = self.capacity
        return capacity is not None and self.current_size >= capacity

    @property
    def open_slots(self):
        capacity = self.capacity
        if capacity is None:
            return None
        return max(0, capacity - self.current_size)


class TeamMember(models.Model):
    """
    Team membership tracking.

    `event` duplicates team.event so the database itself can refuse a second
    membership for the same user in the same event.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='members')
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name='team_memberships')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='team_memberships',
    )
    role = models.CharField(max_length=50, blank=True, default="")
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['event', 'user'], name='one_team_per_user_per_event'),
        ]
        indexes = [
            models.Index(fields=['team', 'joined_at'], name='teammember_team_joined_idx'),
        ]

    def __str__(self):
        return f"{self.user} in {self.team.name}"


class TeamJoinRequest(models.Model):
    """
    A requester's proposal to join a team, decided by the team leader.

    pending -> accepted | declined   (leader decision, or cascade on team delete)
    pending -> cancelled             (requester withdraws)

    Decided requests are never re-opened; retrying creates a new row.
    """
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='join_requests')
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name='team_join_requests')
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='team_join_requests',
    )
    preferred_role = models.CharField(max_length=50, blank=True, null=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decided_team_join_requests',
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['event', 'requester'],
                condition=Q(status="pending"),
                name='one_pending_request_per_event',
            ),
        ]
        indexes = [
            models.Index(fields=['team', 'status'], name='joinreq_team_status_idx'),
            models.Index(fields=['requester', 'status'], name='joinreq_requester_status_idx'),
        ]

    def __str__(self):
        return f"{self.requester} -> {self.team.name} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING
