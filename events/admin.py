from django.contrib import admin
from .models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('title', 'team_capacity', 'created_at')
    search_fields = ('title',)
    date_hierarchy = 'created_at'
