from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.accounts.constants import Emirate, UserRole
from modules.accounts.models import Address, User
from modules.catalog.constants import ProductUnit
from modules.catalog.models import Category, Product, Stock
from modules.delivery.models import DeliveryZone
from modules.finance.constants import AccountType
from modules.finance.models import FinanceAccount
from modules.loyalty.factories import build_loyalty_service
from modules.orders.dtos import CreateOrderDTO, OrderItemDTO
from modules.orders.factories import build_order_service
from modules.orders.models import Order
from modules.promotions.constants import DiscountType
from modules.promotions.models import DiscountCode

SEED_PASSWORD = "Butcher@123"

USERS = [
    ("admin", "admin@butcher.ae", "Admin", UserRole.ADMIN),
    ("staff", "staff@butcher.ae", "Sara", UserRole.STAFF),
    ("driver", "driver@butcher.ae", "Rashid", UserRole.DELIVERY),
    ("ahmed", "ahmed@example.ae", "Ahmed", UserRole.CUSTOMER),
    ("fatima", "fatima@example.ae", "Fatima", UserRole.CUSTOMER),
    ("omar", "omar@example.ae", "Omar", UserRole.CUSTOMER),
]

CATALOG = {
    ("Beef", "لحم بقر", "beef"): [
        ("BEEF-RIB-001", "Ribeye Steak", "ستيك ريب آي", Decimal("129.00"), ProductUnit.KG),
        ("BEEF-MIN-001", "Minced Beef", "لحم بقر مفروم", Decimal("49.00"), ProductUnit.KG),
        ("BEEF-TEN-001", "Beef Tenderloin", "فيليه بقر", Decimal("159.00"), ProductUnit.KG),
    ],
    ("Lamb", "لحم غنم", "lamb"): [
        ("LAMB-CHP-001", "Lamb Chops", "ريش غنم", Decimal("89.00"), ProductUnit.KG),
        ("LAMB-LEG-001", "Whole Lamb Leg", "فخذ غنم كامل", Decimal("75.00"), ProductUnit.KG),
    ],
    ("Chicken", "دجاج", "chicken"): [
        ("CHK-WHL-001", "Whole Chicken", "دجاجة كاملة", Decimal("22.00"), ProductUnit.PIECE),
        ("CHK-BRS-001", "Chicken Breast", "صدر دجاج", Decimal("35.00"), ProductUnit.KG),
    ],
    ("Marinated", "متبل", "marinated"): [
        ("MAR-KFT-001", "Kofta Mix", "كفتة", Decimal("55.00"), ProductUnit.KG),
        ("MAR-SHW-001", "Shawarma Strips", "شاورما", Decimal("42.00"), ProductUnit.KG),
    ],
}

ZONES = [
    ("Dubai Marina", Emirate.DUBAI, ["Dubai Marina", "JBR", "JLT"], Decimal("10.00"), True),
    ("Downtown Dubai", Emirate.DUBAI, ["Downtown", "Business Bay", "DIFC"], Decimal("15.00"), True),
    ("Abu Dhabi City", Emirate.ABU_DHABI, ["Al Reem", "Khalifa City"], Decimal("20.00"), False),
    ("Sharjah", Emirate.SHARJAH, ["Al Majaz", "Al Nahda"], Decimal("20.00"), False),
]

ACCOUNTS = [
    ("Cash Register", AccountType.CASH, Decimal("2000.00")),
    ("Emirates NBD", AccountType.BANK, Decimal("50000.00")),
    ("Card Settlements", AccountType.CARD_PAYMENTS, Decimal("0.00")),
    ("COD Collections", AccountType.COD_COLLECTIONS, Decimal("0.00")),
    ("Petty Cash", AccountType.PETTY_CASH, Decimal("500.00")),
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        with transaction.atomic():
            users = self._seed_users()
            products = self._seed_catalog()
            zones = self._seed_zones()
            codes = self._seed_discount_codes()
            accounts = self._seed_accounts()
            tiers = build_loyalty_service().tiers()
        orders_created = self._seed_orders(
            [u for u in users if u.role == UserRole.CUSTOMER], products, users[0]
        )

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"products={len(products)}, "
                f"zones={len(zones)}, "
                f"discount_codes={len(codes)}, "
                f"finance_accounts={len(accounts)}, "
                f"loyalty_tiers={len(tiers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> list[User]:
        self.stdout.write("Creating users...")
        users: list[User] = []
        for username, email, first_name, role in USERS:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User(
                    username=username,
                    email=email,
                    first_name=first_name,
                    mobile=f"+9715{random.randint(10000000, 99999999)}",
                    role=role,
                    emirate=Emirate.DUBAI,
                    is_verified=True,
                )
                user.set_password(SEED_PASSWORD)
                user.save()
            if role == UserRole.CUSTOMER and not user.addresses.alive().exists():
                Address.objects.create(
                    user=user,
                    full_name=user.full_name,
                    mobile=user.mobile,
                    emirate=Emirate.DUBAI,
                    area="Dubai Marina",
                    street="Al Marsa Street",
                    building=f"Marina Tower {random.randint(1, 9)}",
                    apartment=str(random.randint(100, 2500)),
                    is_default=True,
                )
            users.append(user)
        return users

    def _seed_catalog(self) -> list[Product]:
        self.stdout.write("Creating categories and products...")
        products: list[Product] = []
        for sort_order, ((name, name_ar, slug), items) in enumerate(CATALOG.items()):
            category, _ = Category.objects.get_or_create(
                slug=slug, defaults={"name": name, "name_ar": name_ar, "sort_order": sort_order}
            )
            for sku, product_name, product_name_ar, price, unit in items:
                product, created = Product.objects.get_or_create(
                    sku=sku,
                    defaults={
                        "name": product_name,
                        "name_ar": product_name_ar,
                        "category": category,
                        "price": price,
                        "cost_price": (price * Decimal("0.6")).quantize(Decimal("0.01")),
                        "unit": unit,
                        "is_featured": random.random() < 0.3,
                    },
                )
                if created:
                    Stock.objects.create(
                        product=product,
                        quantity=Decimal(random.randint(40, 200)),
                        last_restocked_at=timezone.now(),
                    )
                products.append(product)
        return products

    def _seed_zones(self) -> list[DeliveryZone]:
        self.stdout.write("Creating delivery zones...")
        zones = []
        for name, emirate, areas, fee, express in ZONES:
            zone, _ = DeliveryZone.objects.get_or_create(
                name=name,
                defaults={
                    "emirate": emirate,
                    "areas": areas,
                    "delivery_fee": fee,
                    "minimum_order": Decimal("50.00"),
                    "express_enabled": express,
                },
            )
            zones.append(zone)
        return zones

    def _seed_discount_codes(self) -> list[DiscountCode]:
        self.stdout.write("Creating discount codes...")
        now = timezone.now()
        definitions = [
            ("WELCOME10", "10% off your first order", DiscountType.PERCENTAGE, Decimal("10"), Decimal("50")),
            ("BBQ25", "AED 25 off BBQ orders", DiscountType.FIXED, Decimal("25"), Decimal("200")),
        ]
        codes = []
        for code, description, kind, value, minimum in definitions:
            discount, _ = DiscountCode.objects.get_or_create(
                code=code,
                defaults={
                    "description": description,
                    "type": kind,
                    "value": value,
                    "minimum_order": minimum,
                    "usage_limit": 500,
                    "valid_from": now - timedelta(days=1),
                    "valid_to": now + timedelta(days=90),
                },
            )
            codes.append(discount)
        return codes

    def _seed_accounts(self) -> list[FinanceAccount]:
        self.stdout.write("Creating finance accounts...")
        return [
            FinanceAccount.objects.get_or_create(
                name=name, defaults={"type": kind, "balance": balance}
            )[0]
            for name, kind, balance in ACCOUNTS
        ]

    def _seed_orders(self, customers: list[User], products: list[Product], admin: User) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.filter(notes__startswith="Seed order").exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = build_order_service()
        created = 0
        for i in range(12):
            customer = random.choice(customers)
            address = customer.addresses.alive().first()
            picked = random.sample(products, k=random.randint(1, 3))
            dto = CreateOrderDTO(
                items=[
                    OrderItemDTO(product_id=p.id, quantity=Decimal(random.randint(3, 5)))
                    for p in picked
                ],
                address_id=address.id,
                notes=f"Seed order {i + 1}",
            )
            order, _ = service.create_order(customer, dto)
            created += 1
            # Walk some orders further down the lifecycle.
            for _ in range(random.randint(0, 2)):
                order = service.advance(str(order.id), changed_by=admin)
        return created
