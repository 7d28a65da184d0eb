# models/property.py
from sqlalchemy import Column, String, Integer, Numeric, Text, JSON, Uuid, Index
from uuid import uuid4
from app.db.base_class import Base


class Property(Base):
    __tablename__ = "properties"

    property_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    agent_id = Column(String(64), nullable=False)  # owning agent's Auth user id
    title = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(15, 2, asdecimal=False), nullable=True)
    transaction_type = Column(String(50), nullable=True)  # Buy, Rent, Book, Service
    type = Column(String(50), nullable=True)  # house, apartment, land, ...
    duration = Column(String(50), nullable=True)
    bedrooms = Column(Integer, nullable=False, default=0)
    toilets = Column(Integer, nullable=False, default=0)
    area = Column(String(50), nullable=True)
    features = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    videos = Column(JSON, nullable=False, default=list)
    youtube_videos = Column(JSON, nullable=False, default=list)
    file_hashes = Column(JSON, nullable=False, default=dict)  # sha256 -> attached URL
    views = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_properties_agent", "agent_id"),
        Index("idx_properties_created", "created_at"),
    )
