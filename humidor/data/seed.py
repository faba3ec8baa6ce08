# humidor/data/seed.py
from decimal import Decimal

from humidor.data.database import SessionLocal, init_db
from humidor.data.models import ProductModel, UserModel, VariantModel
from humidor.repos.user_repo import UserRepo
from humidor.utils.logging import get_logger
from humidor.utils.settings import ADMIN_EMAIL

logger = get_logger(__name__)

CATALOG = [
    ("Cedar Desktop Humidor", "cedar-desktop-humidor", [("25 ct", "Mahogany", "48.00", 10), ("50 ct", "Mahogany", "72.00", 5)]),
    ("Double Guillotine Cutter", "double-guillotine-cutter", [(None, "Steel", "20.00", 30), (None, "Black", "21.00", 20)]),
    ("Triple Jet Torch Lighter", "triple-jet-torch-lighter", [(None, "Gunmetal", "35.00", 15)]),
    ("Leather Travel Case", "leather-travel-case", [("3 finger", "Brown", "59.00", 8)]),
    ("Crystal Ashtray", "crystal-ashtray", [(None, "Clear", "42.00", 6)]),
    ("Humidity Control Pack", "humidity-control-pack", [("69%", None, "6.00", 100), ("72%", None, "6.00", 100)]),
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        if ADMIN_EMAIL and not UserRepo(db).get_by_email(ADMIN_EMAIL):
            db.add(UserModel(name="Admin", email=ADMIN_EMAIL, is_admin=True))
            logger.info(f"Created admin user {ADMIN_EMAIL}")
        elif not ADMIN_EMAIL:
            logger.info("Skipping admin user creation: ADMIN_EMAIL is not set")

        # only seed an empty catalog
        if db.query(ProductModel).first():
            db.commit()
            return

        for name, slug, variants in CATALOG:
            product = ProductModel(name=name, slug=slug)
            for i, (size, color, price, inventory) in enumerate(variants, start=1):
                product.variants.append(
                    VariantModel(
                        size=size,
                        color=color,
                        sku=f"{slug.upper()}-{i}",
                        price=Decimal(price),
                        inventory=inventory,
                    )
                )
            db.add(product)
        db.commit()
        logger.info(f"Seeded {len(CATALOG)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
