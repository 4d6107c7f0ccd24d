# core/constants.py

# --- Activity Verbs (Standard Registry) ---

# Team lifecycle
ACTIVITY_TEAM_CREATED = "team.created"
ACTIVITY_TEAM_UPDATED = "team.updated"
ACTIVITY_TEAM_DELETED = "team.deleted"

# Membership
ACTIVITY_MEMBER_JOINED = "team.member_joined"
ACTIVITY_MEMBER_LEFT = "team.member_left"

# Join requests
ACTIVITY_REQUEST_CREATED = "join_request.created"
ACTIVITY_REQUEST_ACCEPTED = "join_request.accepted"
ACTIVITY_REQUEST_DECLINED = "join_request.declined"
ACTIVITY_REQUEST_CANCELLED = "join_request.cancelled"
