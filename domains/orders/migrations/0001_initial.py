import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("artwork_id", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("art_name", models.CharField(max_length=200)),
                ("artist_name", models.CharField(blank=True, default="", max_length=200)),
                ("price", models.PositiveIntegerField(help_text="minor currency units (cents)")),
                ("currency", models.CharField(default="usd", max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("payment_intent_id", models.CharField(blank=True, default=None, max_length=100, null=True)),
                ("transaction_id", models.CharField(blank=True, default=None, max_length=100, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("failure_reason", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_name", models.CharField(blank=True, default="", max_length=100)),
                ("delivery_address", models.CharField(blank=True, default="", max_length=200)),
                ("delivery_city", models.CharField(blank=True, default="", max_length=100)),
                ("delivery_state", models.CharField(blank=True, default="", max_length=100)),
                ("delivery_zip_code", models.CharField(blank=True, default="", max_length=20)),
                ("delivery_country", models.CharField(blank=True, default="", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "buyer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "indexes": [
                    models.Index(fields=["buyer", "created_at"], name="orders_buyer_c1d2e3_idx"),
                    models.Index(fields=["seller", "created_at"], name="orders_seller_f4a5b6_idx"),
                    models.Index(fields=["status"], name="orders_status_9a8b7c_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("price__gte", 0)), name="ck_order_price_ge_0"),
                ],
            },
        ),
    ]
