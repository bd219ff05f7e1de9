import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditEvent",
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
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("actor_user_id", models.CharField(max_length=255)),
                (
                    "actor_roles",
                    models.JSONField(
                        default=list,
                        help_text="Snapshot of the actor's role names at execution time.",
                    ),
                ),
                ("command_type", models.CharField(max_length=100)),
                (
                    "entity_type",
                    models.CharField(
                        help_text=(
                            "From the command's entity_ref, else the first segment "
                            "of command_type."
                        ),
                        max_length=100,
                    ),
                ),
                ("entity_id", models.CharField(blank=True, max_length=255, null=True)),
                ("before_json", models.JSONField(blank=True, null=True)),
                ("after_json", models.JSONField(blank=True, null=True)),
                ("reason", models.TextField(blank=True, null=True)),
                ("metadata_json", models.JSONField(blank=True, null=True)),
                ("device_id", models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                "db_table": "audit_events",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["actor_user_id", "created_at"],
                        name="idx_audit_actor_time",
                    ),
                    models.Index(
                        fields=["command_type"],
                        name="idx_audit_command_type",
                    ),
                    models.Index(
                        fields=["entity_type", "entity_id"],
                        name="idx_audit_entity",
                    ),
                ],
            },
        ),
    ]
