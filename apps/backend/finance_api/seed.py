from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .core.config import get_settings
from .core.database import Base, SessionLocal, engine
from .core.logging_config import configure_logging
from .services.category_service import CategoryService


logger = logging.getLogger(__name__)


def seed() -> None:
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    try:
        rows = CategoryService(db).seed_defaults()
        logger.info("seed complete: %d default categories added", len(rows))
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging(get_settings())
    seed()
