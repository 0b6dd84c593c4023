from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ('email', 'first_name', 'role', 'subscription_active', 'is_staff')
    list_filter = UserAdmin.list_filter + ('role', 'subscription_active')
    fieldsets = UserAdmin.fieldsets + (
        ('Marketplace', {'fields': ('role', 'subscription_active', 'stripe_customer_id', 'subscription_updated_at')}),
    )
