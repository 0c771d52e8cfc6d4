import uuid as uuid_lib

from django.db import models

from stock.utils import normalize_text


class Product(models.Model):
    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    distributor = models.ForeignKey(
        "directory.Distributor", on_delete=models.CASCADE, related_name="products"
    )
    sku = models.CharField(max_length=50)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    base_price = models.DecimalField(max_digits=12, decimal_places=2)
    discounted_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    is_active = models.BooleanField(default=True, db_index=True)
    # Normalized copies of name and sku that stock search filters on
    search_name = models.CharField(max_length=200, blank=True, default="", editable=False)
    search_sku = models.CharField(max_length=50, blank=True, default="", editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        unique_together = [("distributor", "sku")]

    def __str__(self):
        return f"{self.sku} – {self.name}"

    def save(self, *args, **kwargs):
        self.search_name = normalize_text(self.name)
        self.search_sku = normalize_text(self.sku)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and {"name", "sku"} & set(update_fields):
            kwargs["update_fields"] = {*update_fields, "search_name", "search_sku"}
        super().save(*args, **kwargs)

    @property
    def effective_price(self):
        if self.discounted_price is not None:
            return self.discounted_price
        return self.base_price


class InventoryLot(models.Model):
    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="lots"
    )
    distributor = models.ForeignKey(
        "directory.Distributor", on_delete=models.CASCADE, related_name="lots"
    )
    lot_number = models.CharField(max_length=100)
    stock_quantity = models.PositiveIntegerField(default=0)
    expiration_date = models.DateField(db_index=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["expiration_date", "created_at", "id"]
        unique_together = [("distributor", "product", "lot_number")]

    def __str__(self):
        return f"Lot {self.lot_number} – {self.product.name}"


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        INBOUND = "INBOUND", "Inbound"
        OUTBOUND = "OUTBOUND", "Outbound"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    lot = models.ForeignKey(
        InventoryLot, on_delete=models.PROTECT, related_name="movements"
    )
    movement_type = models.CharField(
        max_length=20, choices=MovementType.choices, db_index=True
    )
    # Positive for INBOUND/OUTBOUND, signed delta for ADJUSTMENT
    quantity = models.IntegerField()
    previous_stock = models.PositiveIntegerField()
    new_stock = models.PositiveIntegerField()
    reason = models.CharField(max_length=255, blank=True, default="")
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["lot", "created_at"], name="stock_move_lot_created_idx"),
            models.Index(fields=["movement_type", "created_at"], name="stock_move_type_created_idx"),
        ]

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.quantity} | {self.lot.lot_number}"
