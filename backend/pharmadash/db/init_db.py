"""Create local tables. Run on app startup."""
import logging

from sqlalchemy.engine import Engine

from pharmadash.db.base import Base
from pharmadash.db.session import engine as default_engine
from pharmadash.models import client_storage  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(engine: Engine = None):
    engine = engine or default_engine
    Base.metadata.create_all(bind=engine)
    logger.info(f"Local storage ready ({engine.url.drivername})")
