import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Policy",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "policy_key",
                    models.CharField(
                        help_text="Policy identifier, unique across the active set.",
                        max_length=255,
                    ),
                ),
                (
                    "policy_value",
                    models.JSONField(
                        help_text="Arbitrary structured value for this version.",
                    ),
                ),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "version",
                    models.PositiveIntegerField(
                        help_text="Monotonically increasing per policy_key, starting at 1.",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_by", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "policies",
                "ordering": ["policy_key", "-version"],
                "indexes": [
                    models.Index(
                        fields=["policy_key", "is_active"],
                        name="idx_policy_key_active",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("policy_key", "version"),
                        name="uq_policy_key_version",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("policy_key",),
                        name="uq_policy_one_active",
                    ),
                ],
            },
        ),
    ]
