# teams/serializers.py
from rest_framework import serializers

from core.sanitizers import (
    normalize_roles,
    sanitize_bio,
    sanitize_name,
    sanitize_text,
    validate_url,
    ValidationError as SanitizationError,
)
from .arbiter import ACTIONS
from .models import Team, TeamJoinRequest, TeamMember


class UserSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)


class RolesRequiredField(serializers.Field):
    """
    Accepts a JSON list of strings or a comma-separated string;
    always stores and returns a list.
    """
    default_error_messages = {
        'invalid': 'Roles must be a list of strings or a comma-separated string.',
    }

    def to_internal_value(self, data):
        try:
            return normalize_roles(data)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))

    def to_representation(self, value):
        return list(value or [])


class TeamMemberSerializer(serializers.ModelSerializer):
    """Serializer for team members"""
    username = serializers.CharField(source='user.username', read_only=True)
    user_id = serializers.IntegerField(source='user.id', read_only=True)

    class Meta:
        model = TeamMember
        fields = ['user_id', 'username', 'role', 'joined_at']
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    """Team with roster and computed capacity state"""
    event_id = serializers.IntegerField(read_only=True)
    leader = UserSummarySerializer(read_only=True)
    roles_required = RolesRequiredField(read_only=True)
    members = serializers.SerializerMethodField()
    capacity = serializers.SerializerMethodField()
    current_size = serializers.SerializerMethodField()
    is_full = serializers.SerializerMethodField()
    open_slots = serializers.SerializerMethodField()
    pending_request_count = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id', 'event_id', 'name', 'bio', 'roles_required',
            'project_name', 'problem_statement', 'project_link', 'is_public',
            'leader', 'members', 'capacity', 'current_size', 'is_full', 'open_slots',
            'pending_request_count', 'status', 'created_at',
        ]
        read_only_fields = fields

    def _size(self, obj):
        size = getattr(obj, 'member_count', None)
        return obj.current_size if size is None else size

    def get_members(self, obj):
        members = sorted(obj.members.all(), key=lambda m: (m.joined_at, m.id))
        return TeamMemberSerializer(members, many=True).data

    def get_capacity(self, obj):
        return obj.capacity

    def get_current_size(self, obj):
        return self._size(obj)

    def get_is_full(self, obj):
        capacity = obj.capacity
        return capacity is not None and self._size(obj) >= capacity

    def get_open_slots(self, obj):
        capacity = obj.capacity
        if capacity is None:
            return None
        return max(0, capacity - self._size(obj))

    def get_pending_request_count(self, obj):
        count = getattr(obj, 'pending_request_count', None)
        if count is None:
            count = obj.join_requests.filter(status=TeamJoinRequest.STATUS_PENDING).count()
        return count


class TeamProfileSerializer(serializers.Serializer):
    """
    Ingress validation for team create/update payloads.
    Use partial=True for updates.
    """
    name = serializers.CharField(max_length=100)
    bio = serializers.CharField(required=False, allow_blank=True, default="")
    roles_required = RolesRequiredField(required=False, default=list)
    project_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    problem_statement = serializers.CharField(required=False, allow_blank=True)
    project_link = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_public = serializers.BooleanField(required=False)

    def validate_name(self, value):
        name = sanitize_name(value)
        if not name:
            raise serializers.ValidationError("Team name is required.")
        return name

    def validate_bio(self, value):
        return sanitize_bio(value)

    def validate_project_name(self, value):
        return sanitize_name(value, max_length=255)

    def validate_problem_statement(self, value):
        return sanitize_bio(value)

    def validate_project_link(self, value):
        try:
            return validate_url(value)
        except SanitizationError as e:
            raise serializers.ValidationError(str(e))


class JoinRequestCreateSerializer(serializers.Serializer):
    preferred_role = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)

    def validate_preferred_role(self, value):
        role = sanitize_name(value, max_length=50)
        return role or None


class JoinRequestTeamSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source='event.title', read_only=True)

    class Meta:
        model = Team
        fields = ['id', 'name', 'event_id', 'event_title', 'status']
        read_only_fields = fields


class JoinRequestSerializer(serializers.ModelSerializer):
    team = JoinRequestTeamSerializer(read_only=True)
    requester = UserSummarySerializer(read_only=True)
    decided_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = TeamJoinRequest
        fields = [
            'id', 'team', 'event_id', 'requester', 'preferred_role',
            'status', 'created_at', 'decided_at', 'decided_by_id',
        ]
        read_only_fields = fields


class RespondToRequestSerializer(serializers.Serializer):
    action = serializers.CharField()

    def validate_action(self, value):
        action = sanitize_text(value).lower()
        if action not in ACTIONS:
            raise serializers.ValidationError(f"Invalid action. Valid actions: {', '.join(ACTIONS)}")
        return action


class RosterEntrySerializer(serializers.Serializer):
    """Serializes (user, role) pairs from the roster query."""

    def to_representation(self, instance):
        user, role = instance
        return {
            'user_id': user.id,
            'username': user.username,
            'role': role,
        }
