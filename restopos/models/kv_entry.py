import sqlalchemy as sa
from sqlalchemy import Column, DateTime, String, func

from restopos.core.database import Base


class KVEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String(64), primary_key=True)
    value = Column(sa.JSON(), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
