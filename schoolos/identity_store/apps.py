"""
School OS Identity Store - App Configuration
============================================
Persistent profiles, roles, role permissions and user role grants.
"""

from django.apps import AppConfig


class IdentityStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "schoolos.identity_store"
    label = "schoolos_identity_store"
    verbose_name = "School OS Identity Store"
