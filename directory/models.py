import uuid as uuid_lib

from django.db import models


class Distributor(models.Model):
    """Tenant boundary. Every product, lot and order belongs to exactly one."""

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    name = models.CharField(max_length=150)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Salesperson(models.Model):
    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    distributor = models.ForeignKey(
        Distributor, on_delete=models.CASCADE, related_name="salespeople"
    )
    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=30, unique=True)
    email = models.EmailField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "salespeople"

    def __str__(self):
        return f"{self.name} ({self.distributor.name})"


class Customer(models.Model):
    """
    A buying business. Identity is not owned by a distributor: the same
    customer can be linked to several distributors through CustomerDistributor.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=30, blank=True, default="", db_index=True)
    email = models.EmailField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    distributors = models.ManyToManyField(
        Distributor,
        through="CustomerDistributor",
        related_name="customers",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class CustomerDistributor(models.Model):
    class ClientType(models.TextChoices):
        RETAIL = "RETAIL", "Retail"
        WHOLESALE = "WHOLESALE", "Wholesale"
        SUPERMARKET = "SUPERMARKET", "Supermarket"
        KIOSK = "KIOSK", "Kiosk"

    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="distributor_links"
    )
    distributor = models.ForeignKey(
        Distributor, on_delete=models.CASCADE, related_name="customer_links"
    )
    client_type = models.CharField(
        max_length=20, choices=ClientType.choices, blank=True, default=""
    )
    assigned_salesperson = models.ForeignKey(
        Salesperson,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_customers",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [("customer", "distributor")]

    def __str__(self):
        return f"{self.customer.name} @ {self.distributor.name}"
