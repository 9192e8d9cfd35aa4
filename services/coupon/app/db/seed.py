"""
Schema creation and demo catalog for local runs (DB_AUTO_CREATE=true).
"""
import logging

from sqlalchemy.engine import Engine

from libs.common import now_utc
from services.coupon.app.db.repositories.purchases import NewProduct, SQLAlchemyPurchaseRepository
from services.coupon.app.db.tables import metadata

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    ("Wireless Laser Printer P2502W", "Compact wireless monochrome laser printer", 99.99, "Printers"),
    ("Network Laser Printer P3255DN", "High-speed duplex network laser printer", 199.99, "Printers"),
    ("High Yield Toner Cartridge TL-410H", "High-yield toner cartridge for laser printers", 49.99, "Cartridges"),
    ("Copy Paper A4 500 Sheets", "80gsm A4 copy paper", 12.99, "Paper"),
    ("Printer Stand with Storage", "Adjustable printer stand with storage compartments", 79.99, "Accessories"),
]


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)


async def seed_demo_products(repository: SQLAlchemyPurchaseRepository) -> int:
    """Inserts the demo catalog when the products table is empty."""
    if await repository.count_products() > 0:
        return 0

    for name, description, price, category in DEMO_PRODUCTS:
        await repository.create_product(
            NewProduct(
                name=name,
                description=description,
                price=price,
                category=category,
                created_at=now_utc(),
            )
        )
    logger.info("Seeded %d demo products", len(DEMO_PRODUCTS))
    return len(DEMO_PRODUCTS)
