import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Distributor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(blank=True, db_index=True, default="", max_length=30)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Salesperson",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("phone", models.CharField(max_length=30, unique=True)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("distributor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="salespeople", to="directory.distributor")),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "salespeople",
            },
        ),
        migrations.CreateModel(
            name="CustomerDistributor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("client_type", models.CharField(blank=True, choices=[("RETAIL", "Retail"), ("WHOLESALE", "Wholesale"), ("SUPERMARKET", "Supermarket"), ("KIOSK", "Kiosk")], default="", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("assigned_salesperson", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_customers", to="directory.salesperson")),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="distributor_links", to="directory.customer")),
                ("distributor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="customer_links", to="directory.distributor")),
            ],
            options={
                "unique_together": {("customer", "distributor")},
            },
        ),
        migrations.AddField(
            model_name="customer",
            name="distributors",
            field=models.ManyToManyField(related_name="customers", through="directory.CustomerDistributor", to="directory.distributor"),
        ),
    ]
