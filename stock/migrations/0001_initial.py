import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("directory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("sku", models.CharField(max_length=50)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("base_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discounted_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("distributor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="products", to="directory.distributor")),
            ],
            options={
                "ordering": ["name"],
                "unique_together": {("distributor", "sku")},
            },
        ),
        migrations.CreateModel(
            name="InventoryLot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("lot_number", models.CharField(max_length=100)),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("expiration_date", models.DateField(db_index=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("distributor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lots", to="directory.distributor")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="lots", to="stock.product")),
            ],
            options={
                "ordering": ["expiration_date", "created_at", "id"],
                "unique_together": {("distributor", "product", "lot_number")},
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("movement_type", models.CharField(choices=[("INBOUND", "Inbound"), ("OUTBOUND", "Outbound"), ("ADJUSTMENT", "Adjustment")], db_index=True, max_length=20)),
                ("quantity", models.IntegerField()),
                ("previous_stock", models.PositiveIntegerField()),
                ("new_stock", models.PositiveIntegerField()),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("lot", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="movements", to="stock.inventorylot")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["lot", "created_at"], name="stock_move_lot_created_idx"),
                    models.Index(fields=["movement_type", "created_at"], name="stock_move_type_created_idx"),
                ],
            },
        ),
    ]
