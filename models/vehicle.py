from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Numeric,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Vehicle(BaseModel, Base):
    __tablename__ = "vehicles"

    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)  # validated > 0 (in schema)
    color = Column(String(50), nullable=True)
    # Stored upper-cased without spaces; uniqueness enforced here
    license_plate = Column(String(20), nullable=False, unique=True, index=True)
    price = Column(Numeric(12, 2), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)

    created_by_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    created_by = relationship("Client")

    __table_args__ = (
        CheckConstraint("year > 0", name="ck_vehicles_year_positive"),
        CheckConstraint("(price IS NULL) OR (price > 0)", name="ck_vehicles_price_positive"),
        Index("ix_vehicles_brand_model", "brand", "model"),
    )
