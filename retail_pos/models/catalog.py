import secrets
import string
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from retail_pos.core.database import Base


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase + string.digits)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("PRD"))
    name = Column(String(200), nullable=False)
    sku = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)

    cost_price = Column(Numeric(15, 2), nullable=False, default=0)
    sell_price = Column(Numeric(15, 2), nullable=False, default=0)

    # Sum of variant stock when has_variants, authoritative otherwise
    stock = Column(Integer, nullable=False, default=0)
    has_variants = Column(Boolean, nullable=False, default=False)

    supplier_id = Column(String(20), ForeignKey("suppliers.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    variants = relationship("Variant", back_populates="product",
                            cascade="all, delete-orphan")
    supplier = relationship("Supplier", back_populates="products")

    def __repr__(self):
        return f"<Product(id='{self.id}', name='{self.name}', stock={self.stock})>"


class Variant(Base):
    __tablename__ = "variants"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("VAR"))
    product_id = Column(String(20), ForeignKey(
        "products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    sku = Column(String(64), nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    price_adjustment = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="variants")

    def __repr__(self):
        return f"<Variant(id='{self.id}', product_id='{self.product_id}', stock={self.stock})>"
