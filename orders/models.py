import uuid as uuid_lib

from django.db import models
from django.utils import timezone


class Order(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Pending"
        CONFIRMED = "CONFIRMED", "Confirmed"
        IN_PREPARATION = "IN_PREPARATION", "In preparation"
        DELIVERED = "DELIVERED", "Delivered"
        CANCELLED = "CANCELLED", "Cancelled"

    # Statuses whose items count as real sales history
    COUNTED_STATUSES = ("CONFIRMED", "IN_PREPARATION", "DELIVERED")

    TRANSITIONS = {
        "DRAFT": ("CONFIRMED", "CANCELLED"),
        "CONFIRMED": ("IN_PREPARATION", "CANCELLED"),
        "IN_PREPARATION": ("DELIVERED",),
        "DELIVERED": (),
        "CANCELLED": (),
    }

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    order_number = models.CharField(max_length=40, unique=True)
    distributor = models.ForeignKey(
        "directory.Distributor", on_delete=models.PROTECT, related_name="orders"
    )
    client = models.ForeignKey(
        "directory.Customer", on_delete=models.PROTECT, related_name="orders"
    )
    salesperson = models.ForeignKey(
        "directory.Salesperson",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True
    )
    total = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    delivery_address = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["distributor", "status"], name="orders_dist_status_idx"),
            models.Index(fields=["distributor", "client", "created_at"], name="orders_dist_client_created_idx"),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.get_status_display()})"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, ())


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "stock.Product", on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} x {self.product.sku}"
