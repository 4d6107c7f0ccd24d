from django.contrib import admin
from .models import Team, TeamMember, TeamJoinRequest


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    readonly_fields = ('user', 'event', 'role', 'joined_at')
    can_delete = False


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'event', 'leader', 'status', 'is_public', 'created_at')
    list_filter = ('status', 'is_public', 'event')
    search_fields = ('name', 'leader__username', 'event__title')
    inlines = [TeamMemberInline]


@admin.register(TeamMember)
class TeamMemberAdmin(admin.ModelAdmin):
    list_display = ('user', 'team', 'event', 'role', 'joined_at')
    list_filter = ('event',)
    search_fields = ('user__username', 'team__name')


@admin.register(TeamJoinRequest)
class TeamJoinRequestAdmin(admin.ModelAdmin):
    list_display = ('requester', 'team', 'event', 'preferred_role', 'status', 'created_at', 'decided_at')
    list_filter = ('status', 'event')
    search_fields = ('requester__username', 'team__name')
    readonly_fields = ('status', 'decided_at', 'decided_by')
