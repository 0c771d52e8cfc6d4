"""
Demo data for local development and agent playground sessions.

Usage:
    python manage.py seed_demo                 # Create the demo distributor
    python manage.py seed_demo --orders 40     # Number of historical orders
    python manage.py seed_demo --reset         # Drop the demo distributor first
"""
import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from directory.models import Distributor, Salesperson, Customer, CustomerDistributor
from orders.models import Order
from orders.services import OrderPipelineService
from stock.models import InventoryLot, Product, StockMovement
from stock.services import CatalogService
from stock.services.base_service import InsufficientStockError

DISTRIBUTOR_NAME = "Distribuidora Central"

SALESPEOPLE = [
    ("Carlos Pérez", "+5491155550001"),
    ("Ana García", "+5491155550002"),
]

CUSTOMERS = [
    ("Supermercado Don Pepe", "+54 11 1111-1111", "Buenos Aires", CustomerDistributor.ClientType.SUPERMARKET),
    ("Almacén La Esquina", "+54 11 2222-2222", "Buenos Aires", CustomerDistributor.ClientType.RETAIL),
    ("MaxiKiosco Centro", "+54 11 3333-3333", "Buenos Aires", CustomerDistributor.ClientType.KIOSK),
    ("Mercadito del Barrio", "+54 341 111-1111", "Rosario", CustomerDistributor.ClientType.RETAIL),
    ("Almacén San José", "+54 341 222-2222", "Rosario", CustomerDistributor.ClientType.WHOLESALE),
]

# sku, name, price, discounted price, stock, days to expiry
PRODUCTS = [
    ("SKU-0001", "Leche Entera 1L", "950.00", None, 240, 12),
    ("SKU-0002", "Leche Descremada 1L", "980.00", None, 120, 20),
    ("SKU-0003", "Yogur Bebible Frutilla 1L", "1450.00", "1290.00", 80, 9),
    ("SKU-0004", "Queso Cremoso x Kg", "7800.00", None, 40, 45),
    ("SKU-0005", "Manteca 200g", "2100.00", None, 90, 60),
    ("SKU-0006", "Dulce de Leche 400g", "2350.00", None, 150, 180),
    ("SKU-0007", "Azúcar 1Kg", "1200.00", None, 300, 365),
    ("SKU-0008", "Yerba Mate 1Kg", "4200.00", "3990.00", 200, 300),
    ("SKU-0009", "Café Molido 500g", "5600.00", None, 60, 240),
    ("SKU-0010", "Galletitas de Agua 300g", "890.00", None, 0, 150),
    ("SKU-0011", "Aceite de Girasol 1.5L", "3100.00", None, 110, 400),
    ("SKU-0012", "Fideos Tirabuzón 500g", "1050.00", None, 180, 330),
]


class Command(BaseCommand):
    help = 'Create a demo distributor with customers, stock and order history'

    def add_arguments(self, parser):
        parser.add_argument('--orders', type=int, default=30, help='Historical orders to create')
        parser.add_argument('--seed', type=int, default=42, help='Random seed')
        parser.add_argument('--reset', action='store_true', help='Delete the existing demo distributor first')

    def handle(self, *args, **options):
        rng = random.Random(options['seed'])

        if options['reset']:
            self.reset()
        elif Distributor.objects.filter(name=DISTRIBUTOR_NAME).exists():
            self.stdout.write(self.style.WARNING(
                f'"{DISTRIBUTOR_NAME}" already exists. Use --reset to recreate it.'
            ))
            return

        with transaction.atomic():
            distributor = Distributor.objects.create(name=DISTRIBUTOR_NAME)
            salespeople = self.create_salespeople(distributor)
            customers = self.create_customers(distributor, salespeople)
            self.create_products(distributor)

        created = self.create_orders(distributor, customers, salespeople, options['orders'], rng)

        self.stdout.write(self.style.SUCCESS('\nDemo data created'))
        self.stdout.write(f'  Distributor:  {distributor.name} (id={distributor.id})')
        self.stdout.write(f'  Salespeople:  {", ".join(s.phone for s in salespeople)}')
        self.stdout.write(f'  Customers:    {len(customers)}')
        self.stdout.write(f'  Products:     {len(PRODUCTS)}')
        self.stdout.write(f'  Orders:       {created}')

    def reset(self):
        distributor = Distributor.objects.filter(name=DISTRIBUTOR_NAME).first()
        if not distributor:
            return
        with transaction.atomic():
            orders = Order.objects.filter(distributor=distributor)
            StockMovement.objects.filter(lot__distributor=distributor).delete()
            orders.delete()
            InventoryLot.objects.filter(distributor=distributor).delete()
            Product.objects.filter(distributor=distributor).delete()
            Customer.objects.filter(distributor_links__distributor=distributor).delete()
            distributor.delete()
        self.stdout.write(self.style.WARNING(f'Deleted "{DISTRIBUTOR_NAME}"'))

    def create_salespeople(self, distributor):
        return [
            Salesperson.objects.create(distributor=distributor, name=name, phone=phone)
            for name, phone in SALESPEOPLE
        ]

    def create_customers(self, distributor, salespeople):
        customers = []
        for index, (name, phone, city, client_type) in enumerate(CUSTOMERS):
            customer = Customer.objects.create(
                name=name,
                phone=phone,
                city=city,
                address=f"Calle {100 + index * 17}, {city}",
            )
            CustomerDistributor.objects.create(
                customer=customer,
                distributor=distributor,
                client_type=client_type,
                assigned_salesperson=salespeople[index % len(salespeople)],
            )
            customers.append(customer)
        return customers

    def create_products(self, distributor):
        today = timezone.localdate()
        for sku, name, price, discount, stock, days in PRODUCTS:
            CatalogService.create_product(
                distributor_id=distributor.id,
                sku=sku,
                name=name,
                base_price=price,
                discounted_price=discount,
                description=f"Producto {name.lower()}",
                initial_stock=stock,
                expiration_date=today + timedelta(days=days),
            )

    def create_orders(self, distributor, customers, salespeople, count, rng):
        """Confirmed orders spread over the last year, backdated after creation"""
        in_stock = [sku for sku, _, _, _, stock, _ in PRODUCTS if stock > 0]
        now = timezone.now()
        created = 0

        for _ in range(count):
            customer = rng.choice(customers)
            skus = rng.sample(in_stock, rng.randint(1, 4))
            items = [{'sku': sku, 'quantity': rng.randint(1, 6)} for sku in skus]
            try:
                result = OrderPipelineService.create_order(
                    distributor_id=distributor.id,
                    client_id=customer.id,
                    items=items,
                    salesperson_id=rng.choice(salespeople).id,
                )
                order_id = result['order']['id']
                OrderPipelineService.confirm_order(order_id, distributor.id)
            except InsufficientStockError as e:
                self.stdout.write(self.style.WARNING(f'  Skipped order: {e.message}'))
                continue

            placed_at = now - timedelta(days=rng.randint(1, 360), hours=rng.randint(0, 10))
            Order.objects.filter(id=order_id).update(
                created_at=placed_at,
                confirmed_at=placed_at + timedelta(minutes=rng.randint(5, 120)),
                status=rng.choice([Order.Status.CONFIRMED, Order.Status.DELIVERED, Order.Status.DELIVERED]),
            )
            created += 1

        return created
