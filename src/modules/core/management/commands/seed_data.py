from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.coupons.models import Coupon, CouponStatus, DiscountType
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, UpdateOrderDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository


class Command(BaseCommand):
    help = "Seed database with realistic development data for the bakery."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=20)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        customers = self._seed_customers()
        products = self._seed_products()
        coupons = self._seed_coupons()
        orders_created = self._seed_orders(customers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"coupons={len(coupons)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="atendente").exists():
            User.objects.create_user("atendente", password="atendente123", is_staff=True)
            created += 1
        return created

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        customers: list[Customer] = []
        seed_customers = [
            ("Ana Souza", "11987654321", "ana@example.com", "Rua das Flores, 120"),
            ("Bruno Lima", "11976543210", "bruno@example.com", "Av. Paulista, 1500"),
            ("Carla Mendes", "11965432109", None, "Rua Augusta, 45"),
            ("Daniel Costa", "11954321098", "daniel@example.com", ""),
            ("Fernanda Rocha", "11943210987", None, "Rua Oscar Freire, 900"),
            ("Helena Ferreira", "11932109876", "helena@example.com", ""),
        ]
        for name, phone, email, address in seed_customers:
            customer, _ = Customer.objects.get_or_create(
                phone=phone,
                defaults={
                    "name": name,
                    "email": email,
                    "addresses": [address] if address else [],
                },
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("BOL-001", "Bolo de Chocolate", "Bolos", Decimal("89.90")),
            ("BOL-002", "Bolo Red Velvet", "Bolos", Decimal("119.90")),
            ("BOL-003", "Bolo de Cenoura", "Bolos", Decimal("59.90")),
            ("DOC-001", "Brigadeiro Gourmet (cento)", "Docinhos", Decimal("160.00")),
            ("DOC-002", "Beijinho (cento)", "Docinhos", Decimal("150.00")),
            ("DOC-003", "Caixa com 12 Brigadeiros", "Docinhos", Decimal("36.00")),
            ("TOR-001", "Torta de Limão", "Tortas", Decimal("79.90")),
            ("TOR-002", "Torta Holandesa", "Tortas", Decimal("94.90")),
            ("KIT-001", "Kit Festa 20 pessoas", "Kits", Decimal("249.00")),
            ("CUP-001", "Cupcake de Baunilha", "Cupcakes", Decimal("9.50")),
        ]
        for sku, name, category, price in catalog:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category,
                    "price": price,
                    "stock_quantity": random.randint(5, 40),
                    "status": ProductStatus.ACTIVE,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_coupons(self) -> list[Coupon]:
        self.stdout.write("Creating coupons...")
        catalog = [
            ("BEMVINDO10", "Boas-vindas: 10% na primeira compra",
             DiscountType.PERCENTAGE, Decimal("10"), Decimal("20.00"), 100),
            ("FESTA15", "R$ 15 off em pedidos acima de R$ 150",
             DiscountType.FIXED, Decimal("15.00"), Decimal("150.00"), 50),
        ]
        coupons: list[Coupon] = []
        for code, description, kind, value, minimum, limit in catalog:
            coupon, _ = Coupon.objects.get_or_create(
                code=code,
                defaults={
                    "description": description,
                    "status": CouponStatus.ACTIVE,
                    "discount_type": kind,
                    "discount_value": value,
                    "minimum_cart_value": minimum,
                    "usage_limit": limit,
                },
            )
            coupons.append(coupon)
        self.stdout.write(self.style.SUCCESS("Creating coupons... Done!"))
        return coupons

    def _seed_orders(
        self, customers: list[Customer], products: list[Product], count: int
    ) -> int:
        """Orders go through ``OrderService`` so stock, coupons and totals agree."""
        self.stdout.write("Creating orders...")
        if Order.objects.filter(notes__startswith="Seed order").exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            coupon_repository=CouponDjangoRepository(),
        )
        final_statuses = [
            OrderStatus.OPEN,
            OrderStatus.IN_PRODUCTION,
            OrderStatus.READY,
            OrderStatus.FINALIZED,
            OrderStatus.FINALIZED,
            OrderStatus.CANCELLED,
        ]

        for i in range(count):
            # first order of each customer uses the welcome coupon
            use_coupon = i < len(customers)
            customer = customers[i] if use_coupon else random.choice(customers)
            picked = random.sample(products, k=random.randint(1, 3))
            if use_coupon and products[0] not in picked:
                picked[0] = products[0]
            order = service.create_order(
                CreateOrderDTO(
                    items=[
                        CreateOrderItemDTO(
                            product_id=p.id, quantity=random.randint(1, 2)
                        )
                        for p in picked
                    ],
                    customer_id=customer.id,
                    coupon_code="BEMVINDO10" if use_coupon else "",
                    notes=f"Seed order {i + 1}",
                )
            )
            target = random.choice(final_statuses)
            if target != OrderStatus.OPEN:
                service.update_order(
                    str(order.id), UpdateOrderDTO(status=target, changed_by="seed")
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
