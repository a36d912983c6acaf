from typing import Any, Dict, List, Optional

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.logger_config import logger
from retail_pos.store.base import DataStore, Row

CUSTOMER_FIELDS = ("name", "email", "phone", "address")
SUPPLIER_FIELDS = ("name", "contact_person", "email", "phone")


def _list(store: DataStore, table: str, search: Optional[str]) -> List[Row]:
    filters = {"name__icontains": search.strip()} if search and search.strip() else None
    with store.transaction() as tx:
        return tx.select(table, filters, order="-created_at")


def _get(store: DataStore, table: str, label: str, record_id: str) -> Row:
    with store.transaction() as tx:
        row = tx.select_one(table, {"id": record_id})
    if not row:
        logger.warning(f"{label} not found: {record_id}")
        raise NotFoundError(f"{label} {record_id} not found")
    return row


def _create(store: DataStore, table: str, fields: tuple, data: Dict[str, Any]) -> Row:
    if not data.get("name") or not str(data["name"]).strip():
        raise ValidationError("name is required")
    with store.transaction() as tx:
        row = tx.insert(table, [{field: data.get(field) for field in fields}])[0]
    logger.info(f"Created {table} record: {row['id']} - {row['name']}")
    return row


# ==================== CUSTOMERS ====================

def get_all_customers(store: DataStore, search: Optional[str] = None) -> List[Row]:
    return _list(store, "customers", search)


def get_customer_by_id(store: DataStore, customer_id: str) -> Row:
    return _get(store, "customers", "Customer", customer_id)


def create_customer(store: DataStore, data: Dict[str, Any]) -> Row:
    return _create(store, "customers", CUSTOMER_FIELDS, data)


def delete_customer(store: DataStore, customer_id: str) -> None:
    """Delete a customer that has no sales orders."""
    with store.transaction() as tx:
        if not tx.select_one("customers", {"id": customer_id}):
            raise NotFoundError(f"Customer {customer_id} not found")
        if tx.select("sales_orders", {"customer_id": customer_id}):
            raise ValidationError("Customer has sales orders and cannot be deleted")
        tx.delete("customers", {"id": customer_id})
    logger.info(f"Customer deleted: {customer_id}")


# ==================== SUPPLIERS ====================

def get_all_suppliers(store: DataStore, search: Optional[str] = None) -> List[Row]:
    return _list(store, "suppliers", search)


def get_supplier_by_id(store: DataStore, supplier_id: str) -> Row:
    return _get(store, "suppliers", "Supplier", supplier_id)


def create_supplier(store: DataStore, data: Dict[str, Any]) -> Row:
    return _create(store, "suppliers", SUPPLIER_FIELDS, data)


def delete_supplier(store: DataStore, supplier_id: str) -> None:
    """Delete a supplier with no purchase orders; its products are unlinked."""
    with store.transaction() as tx:
        if not tx.select_one("suppliers", {"id": supplier_id}):
            raise NotFoundError(f"Supplier {supplier_id} not found")
        if tx.select("purchase_orders", {"supplier_id": supplier_id}):
            raise ValidationError("Supplier has purchase orders and cannot be deleted")
        tx.update("products", {"supplier_id": supplier_id}, {"supplier_id": None})
        tx.delete("suppliers", {"id": supplier_id})
    logger.info(f"Supplier deleted: {supplier_id}")
