import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("directory", "0001_initial"),
        ("stock", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("order_number", models.CharField(max_length=40, unique=True)),
                ("status", models.CharField(choices=[("DRAFT", "Pending"), ("CONFIRMED", "Confirmed"), ("IN_PREPARATION", "In preparation"), ("DELIVERED", "Delivered"), ("CANCELLED", "Cancelled")], db_index=True, default="DRAFT", max_length=20)),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("delivery_address", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="directory.customer")),
                ("distributor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="directory.distributor")),
                ("salesperson", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="directory.salesperson")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["distributor", "status"], name="orders_dist_status_idx"),
                    models.Index(fields=["distributor", "client", "created_at"], name="orders_dist_client_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=14)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="stock.product")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
