"""
School OS Policy Store — App Configuration
=============================================
Append-only, versioned key/value policies.
Mutated only through the policy.update command.
"""

from django.apps import AppConfig


class PolicyStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "schoolos.policies"
    label = "schoolos_policies"
    verbose_name = "School OS Policy Store"
