"""Development seed data: two default accounts and a handful of listings."""
from sqlalchemy.orm import Session

from marketplace.models.product import Product, ProductStatus
from marketplace.models.user import User
from marketplace.utils.logging import get_logger

log = get_logger("seed")

DEFAULT_USERS = [
    {
        "username": "admin",
        "email": "admin@example.com",
        "full_name": "Marketplace Admin",
        "phone": "081234567890",
        "role": "admin",
    },
    {
        "username": "user",
        "email": "user@example.com",
        "full_name": "Regular User",
        "phone": "081234567891",
        "role": "user",
    },
]

# listed by the admin account
DEFAULT_PRODUCTS = [
    {"name": "Street Deck 8.0", "category": "deck", "condition": "new", "price_cents": 75000},
    {"name": "Cruiser Wheels 54mm", "category": "wheels", "condition": "like_new", "price_cents": 32000},
    {"name": "Trucks 139mm", "category": "trucks", "condition": "good", "price_cents": 45050},
    {"name": "Bearings ABEC-7", "category": "bearings", "condition": "fair", "price_cents": 9900},
]


def seed_dev_data(db: Session) -> bool:
    """
    Seed users and products when the user table is empty.
    Returns True if anything was written.
    """
    if db.query(User).count() > 0:
        log.info("Seeding skipped - data already exists")
        return False

    users = [User(is_active=True, **u) for u in DEFAULT_USERS]
    db.add_all(users)
    db.flush()
    seller = users[0]
    for p in DEFAULT_PRODUCTS:
        db.add(
            Product(
                user_id=seller.id,
                status=ProductStatus.AVAILABLE.value,
                is_active=True,
                description=f"{p['name']} ({p['condition']})",
                **p,
            )
        )
    db.commit()
    log.info("Seeded %s users and %s products", len(users), len(DEFAULT_PRODUCTS))
    return True
