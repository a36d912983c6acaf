# retail_pos/models/__init__.py
from .catalog import Product, Variant, generate_custom_id
from .contact import Customer, Supplier
from .orders import SaleStatus, SalesOrder, SalesItem, PurchaseOrder, PurchaseItem
from .expense import Expense
