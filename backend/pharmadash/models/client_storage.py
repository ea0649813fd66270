from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from pharmadash.db.base import Base


class ClientStorageEntry(Base):
    """Key/value pair of client-local storage (e.g. endpointUrl, accessKey)."""
    __tablename__ = "client_storage"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
