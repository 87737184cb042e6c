import django.db.models.deletion
import django.db.models.expressions
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Resource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, max_length=255)),
                (
                    "approval_required",
                    models.BooleanField(
                        default=False,
                        help_text="Bookings stay pending until a manager approves them.",
                    ),
                ),
                (
                    "display_order",
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        help_text="Position in listings; empty means after all ordered resources.",
                    ),
                ),
                ("image_ref", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="resources",
                        to="users.organization",
                    ),
                ),
                (
                    "managers",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Members who approve, reject and cancel bookings of this resource.",
                        related_name="managed_resources",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Resource",
                "verbose_name_plural": "Resources",
                "ordering": [
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("display_order"), nulls_last=True
                    ),
                    "id",
                ],
                "indexes": [
                    models.Index(fields=["organization", "display_order"], name="resource_org_order_idx"),
                ],
            },
        ),
    ]
