# humidor/data/models/product.py
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from humidor.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    variants = relationship("VariantModel", back_populates="product")


class VariantModel(Base):
    __tablename__ = "variants"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    size = Column(String, nullable=True)
    color = Column(String, nullable=True)
    sku = Column(String, nullable=False, unique=True)
    inventory = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False)

    product = relationship("ProductModel", back_populates="variants")

    __table_args__ = (CheckConstraint("inventory >= 0", name="ck_variant_inventory_non_negative"),)
