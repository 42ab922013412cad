import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Shipping",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tracking_number", models.CharField(blank=True, default="", max_length=64)),
                (
                    "carrier",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("USPS", "USPS"),
                            ("UPS", "UPS"),
                            ("FedEx", "FedEx"),
                            ("DHL", "DHL"),
                            ("CanadaPost", "Canada Post"),
                            ("RoyalMail", "Royal Mail"),
                            ("AustraliaPost", "Australia Post"),
                            ("LaPoste", "La Poste"),
                            ("DeutschePost", "Deutsche Post"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                (
                    "shipment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("shipped", "Shipped"),
                            ("in_transit", "In Transit"),
                            ("out_for_delivery", "Out For Delivery"),
                            ("delivered", "Delivered"),
                            ("exception", "Exception"),
                            ("returned", "Returned"),
                        ],
                        default="pending",
                        max_length=24,
                    ),
                ),
                ("shipped_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("tracking_events", models.JSONField(blank=True, default=list)),
                ("verified", models.BooleanField(default=False)),
                ("poll_attempts", models.PositiveIntegerField(default=0)),
                ("last_polled_at", models.DateTimeField(blank=True, null=True)),
                ("next_poll_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shipping",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_shipping",
                "indexes": [
                    models.Index(fields=["shipment_status", "next_poll_at"], name="order_shipp_status_7c1e2a_idx"),
                    models.Index(fields=["carrier", "tracking_number"], name="order_shipp_carrier_3b9d41_idx"),
                ],
            },
        ),
    ]
