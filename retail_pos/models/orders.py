import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from retail_pos.core.database import Base
from retail_pos.models.catalog import generate_custom_id


class SaleStatus(str, enum.Enum):
    completed = "completed"
    cancelled = "cancelled"


class SalesOrder(Base):
    __tablename__ = "sales_orders"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("SO"))
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=False, index=True)
    status = Column(Enum(SaleStatus), nullable=False, default=SaleStatus.completed)
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    customer = relationship("Customer", back_populates="sales_orders")
    items = relationship("SalesItem", back_populates="order",
                         cascade="all, delete-orphan", order_by="SalesItem.line_no")


class SalesItem(Base):
    __tablename__ = "sales_items"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("SOI"))
    sales_order_id = Column(String(20), ForeignKey(
        "sales_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    line_no = Column(Integer, nullable=False, default=0)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False)
    variant_id = Column(String(20), ForeignKey("variants.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    # Effective price captured when the sale was submitted
    unit_price = Column(Numeric(15, 2), nullable=False)
    subtotal = Column(Numeric(15, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("SalesOrder", back_populates="items")


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PO"))
    supplier_id = Column(String(20), ForeignKey("suppliers.id"), nullable=False, index=True)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    supplier = relationship("Supplier", back_populates="purchase_orders")
    items = relationship("PurchaseItem", back_populates="order",
                         cascade="all, delete-orphan", order_by="PurchaseItem.line_no")


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("POI"))
    purchase_order_id = Column(String(20), ForeignKey(
        "purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    line_no = Column(Integer, nullable=False, default=0)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False)
    variant_id = Column(String(20), ForeignKey("variants.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(15, 2), nullable=False)
    line_total = Column(Numeric(15, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("PurchaseOrder", back_populates="items")
