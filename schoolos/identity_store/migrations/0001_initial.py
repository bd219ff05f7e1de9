from django.db import migrations, models

ROLE_CHOICES = [
    ("teacher", "Teacher"),
    ("clerk", "Clerk"),
    ("principal", "Principal"),
    ("admin", "Administrator"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.CharField(max_length=255, primary_key=True, serialize=False)),
                ("email", models.CharField(blank=True, default="", max_length=255)),
                ("full_name", models.CharField(blank=True, default="", max_length=255)),
                ("avatar_url", models.CharField(blank=True, max_length=1024, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "profiles",
                "ordering": ["full_name", "id"],
            },
        ),
        migrations.CreateModel(
            name="Role",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(choices=ROLE_CHOICES, max_length=32, unique=True)),
                ("display_name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "roles",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="RolePermission",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("permission", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "role",
                    models.ForeignKey(
                        db_column="role_id",
                        on_delete=models.deletion.PROTECT,
                        related_name="role_permissions",
                        to="schoolos_identity_store.role",
                    ),
                ),
            ],
            options={
                "db_table": "role_permissions",
                "ordering": ["role_id", "permission", "id"],
                "indexes": [
                    models.Index(fields=["permission"], name="idx_role_perm_permission"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("role", "permission"),
                        name="uq_role_permission",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UserRole",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("user_id", models.CharField(max_length=255)),
                ("role", models.CharField(choices=ROLE_CHOICES, max_length=32)),
                ("assigned_by", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "user_roles",
                "ordering": ["user_id", "role", "id"],
                "indexes": [
                    models.Index(fields=["user_id"], name="idx_user_roles_user"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_id", "role"),
                        name="uq_user_role",
                    ),
                ],
            },
        ),
    ]
