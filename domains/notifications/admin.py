from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "recipient", "actor", "order", "read_at", "created_at")
    list_filter = ("type", "created_at")
    search_fields = ("recipient__email", "title", "message", "order__id")
    readonly_fields = ("created_at",)
    ordering = ("-created_at",)
