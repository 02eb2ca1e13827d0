import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("organizer_id", models.UUIDField(db_index=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("eligibility", models.CharField(blank=True, default="", max_length=255)),
                (
                    "type",
                    models.CharField(
                        choices=[("normal", "Normal"), ("merchandise", "Merchandise")],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("published", "Published"),
                            ("ongoing", "Ongoing"),
                            ("completed", "Completed"),
                            ("closed", "Closed"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("registration_deadline", models.DateTimeField(blank=True, null=True)),
                ("event_start_date", models.DateTimeField(blank=True, null=True)),
                ("event_end_date", models.DateTimeField(blank=True, null=True)),
                ("registration_limit", models.PositiveIntegerField(default=100)),
                ("purchase_limit", models.PositiveIntegerField(blank=True, null=True)),
                ("registration_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("registration_count", models.PositiveIntegerField(default=0)),
                ("revenue", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("custom_form", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["-created_at"], name="ticketing_e_created_3c1e8b_idx"),
                    models.Index(fields=["status"], name="ticketing_e_status_6f0a2d_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("type", "merchandise"))
                        | models.Q(("registration_count__lte", models.F("registration_limit"))),
                        name="registration_count_within_limit",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MerchandiseVariant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("size", models.CharField(max_length=50)),
                ("color", models.CharField(max_length=50)),
                ("stock", models.PositiveIntegerField(default=0)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variants",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "ordering": ["position", "size", "color"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "size", "color"), name="unique_variant_per_event"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("target_size", models.PositiveSmallIntegerField()),
                ("leader_id", models.UUIDField()),
                ("invite_code", models.CharField(max_length=16, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("forming", "Forming"), ("completed", "Completed")],
                        default="forming",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="teams",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["event", "invite_code"], name="ticketing_t_event_i_9b47c1_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("target_size__gte", 2), ("target_size__lte", 6)),
                        name="team_size_in_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TeamMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("participant_id", models.UUIDField()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("accepted", "Accepted"), ("rejected", "Rejected")],
                        default="accepted",
                        max_length=20,
                    ),
                ),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="team_members",
                        to="ticketing.event",
                    ),
                ),
                (
                    "team",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="ticketing.team",
                    ),
                ),
            ],
            options={
                "ordering": ["joined_at", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "participant_id"), name="one_team_per_event"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("participant_id", models.UUIDField(db_index=True)),
                ("ticket_id", models.CharField(max_length=64, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("registered", "Registered"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="registered",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("paid", "Paid"), ("pending", "Pending")],
                        default="paid",
                        max_length=20,
                    ),
                ),
                ("form_data", models.JSONField(blank=True, default=dict)),
                ("attended", models.BooleanField(default=False)),
                ("attendance_timestamp", models.DateTimeField(blank=True, null=True)),
                ("variant_size", models.CharField(blank=True, max_length=50, null=True)),
                ("variant_color", models.CharField(blank=True, max_length=50, null=True)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="ticketing.event",
                    ),
                ),
                (
                    "team",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="ticketing.team",
                    ),
                ),
            ],
            options={
                "ordering": ["-registered_at"],
                "indexes": [
                    models.Index(fields=["event", "registered_at"], name="ticketing_r_event_i_4d2a7e_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "cancelled"), _negated=True),
                        fields=("participant_id", "event"),
                        name="unique_active_registration",
                    ),
                ],
            },
        ),
    ]
