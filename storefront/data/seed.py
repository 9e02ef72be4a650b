# storefront/data/seed.py
import os

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import BrandModel, CategoryModel, ProductModel, ProductVariantModel, UserModel
from storefront.services.user_service import pwd_context

BRANDS = [
    {"name": "Keychron", "slug": "keychron", "is_featured": True},
    {"name": "Logitech", "slug": "logitech"},
    {"name": "Dell", "slug": "dell"},
]

CATEGORIES = [
    {"name": "Peripherals", "slug": "peripherals", "children": [
        {"name": "Keyboards", "slug": "keyboards"},
        {"name": "Mice", "slug": "mice"},
    ]},
    {"name": "Displays", "slug": "displays", "children": []},
]

CATALOG = [
    {
        "name": "Mechanical Keyboard",
        "slug": "mechanical-keyboard",
        "sku": "KB-001",
        "price": 19999,
        "stock_quantity": 25,
        "brand": "keychron",
        "categories": ["peripherals", "keyboards"],
        "variants": [
            {"name": "Red switches", "sku": "KB-001-RED", "price": 19999, "stock_quantity": 10},
            {"name": "Brown switches", "sku": "KB-001-BRN", "price": 20999, "stock_quantity": 8},
        ],
    },
    {
        "name": "Wireless Mouse",
        "slug": "wireless-mouse",
        "sku": "MS-001",
        "price": 4950,
        "stock_quantity": 60,
        "brand": "logitech",
        "categories": ["peripherals", "mice"],
        "variants": [],
    },
    {
        "name": "27in Monitor",
        "slug": "27in-monitor",
        "sku": "MN-027",
        "price": 89900,
        "stock_quantity": 5,
        "brand": "dell",
        "categories": ["displays"],
        "variants": [],
    },
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # tylko pusta baza
        if db.query(ProductModel).first():
            return

        brands = {b["slug"]: BrandModel(**b) for b in BRANDS}
        categories = {}
        for sort_order, entry in enumerate(CATEGORIES):
            parent = CategoryModel(name=entry["name"], slug=entry["slug"], sort_order=sort_order)
            categories[parent.slug] = parent
            for child in entry["children"]:
                categories[child["slug"]] = CategoryModel(parent=parent, **child)

        for entry in CATALOG:
            product = ProductModel(
                name=entry["name"],
                slug=entry["slug"],
                sku=entry["sku"],
                price=entry["price"],
                stock_quantity=entry["stock_quantity"],
                status="published",
                brand=brands[entry["brand"]],
                categories=[categories[slug] for slug in entry["categories"]],
                variants=[ProductVariantModel(**v) for v in entry["variants"]],
            )
            db.add(product)

        #konto do panelu katalogu, haslo z env
        admin_email = os.getenv("SEED_ADMIN_EMAIL")
        admin_password = os.getenv("SEED_ADMIN_PASSWORD")
        if admin_email and admin_password:
            db.add(
                UserModel(
                    name="Admin",
                    email=admin_email.lower(),
                    password_hash=pwd_context.hash(admin_password),
                    is_admin=True,
                )
            )
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
