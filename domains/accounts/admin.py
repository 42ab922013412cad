# domains/accounts/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "username", "name", "role", "status", "is_staff", "created_at")
    list_filter = ("role", "status", "is_staff", "is_superuser")
    search_fields = ("email", "username", "name")
    ordering = ("-created_at",)

    readonly_fields = ("created_at", "updated_at", "is_staff")

    fieldsets = (
        ("Account", {"fields": ("email", "username", "password")}),
        ("Profile", {"fields": ("name", "first_name", "last_name")}),
        ("Permissions", {
            "fields": ("role", "status", "is_active", "is_superuser", "groups", "user_permissions"),
            "description": "is_staff follows role on save.",
        }),
        ("Dates", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "username", "password1", "password2", "role", "is_active"),
        }),
    )
