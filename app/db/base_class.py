# db/base_class.py
from sqlalchemy.orm import declarative_base, declared_attr
from datetime import datetime
from sqlalchemy import Column, DateTime


class _Base:
    # Generate __tablename__ automatically if not provided
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    # Timestamps for all tables
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


Base = declarative_base(cls=_Base)
