# smartware/models/store.py

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from smartware.database import Base


class StoreEntry(Base):
    __tablename__ = "store_entries"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
