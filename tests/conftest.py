from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront_core.clock import FrozenClock
from storefront_core.models import Base, Product as ProductRecord

# Wednesday, 10:00 local time
NOW = datetime(2024, 5, 15, 10, 0)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def store_config():
    """Store open every day 09:00-18:00, delivering 11:00-14:00 on weekdays only."""
    return {
        "id": "store_1",
        "name": "Casa da Pizza",
        "allow_scheduling": True,
        "business_hours": {
            day: {"open": "09:00", "close": "18:00", "closed": False} for day in WEEKDAYS
        },
        "delivery_schedule": {
            **{day: {"start": "11:00", "end": "14:00", "enabled": True} for day in WEEKDAYS[:5]},
            "saturday": {"start": "11:00", "end": "14:00", "enabled": False},
            "sunday": {"start": "11:00", "end": "14:00", "enabled": False},
        },
        "special_dates": [],
    }


@pytest.fixture
def tracked_product():
    """A product with 5 units per day, reset today and fully stocked."""
    return {
        "id": "cake",
        "name": "Chocolate Cake",
        "price": 40.0,
        "daily_stock": 5,
        "current_stock": 5,
        "stock_last_reset": NOW.replace(hour=0, minute=5).isoformat(),
        "allow_same_day_scheduling": True,
    }


@pytest.fixture
def sold_out_product(tracked_product):
    return {**tracked_product, "id": "sold_out_cake", "current_stock": 0}


@pytest.fixture
def db():
    """In-memory SQLite session seeded with one tracked and one untracked product.

    Uses StaticPool so all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()

    session.add(ProductRecord(
        id="cake",
        name="Chocolate Cake",
        price=40.0,
        daily_stock=5,
        current_stock=3,
        stock_last_reset=NOW.replace(hour=0, minute=5),
    ))
    session.add(ProductRecord(
        id="soda",
        name="Soda",
        price=6.0,
    ))
    session.commit()

    yield session
    session.close()
