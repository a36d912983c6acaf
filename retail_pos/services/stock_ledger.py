import enum
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.logger_config import logger
from retail_pos.store.base import Row, UnitOfWork


class StockDirection(str, enum.Enum):
    ADD = "add"
    DEDUCT = "deduct"

    @property
    def sign(self) -> int:
        return 1 if self is StockDirection.ADD else -1


@dataclass(frozen=True)
class StockTarget:
    """The stock row a line touches: a variant if set, else the product itself."""
    product_id: str
    variant_id: Optional[str] = None

    @classmethod
    def of(cls, item: Any) -> "StockTarget":
        """Accept a stored item row (dict) or a LineItem."""
        if isinstance(item, dict):
            return cls(product_id=item.get("product_id"), variant_id=item.get("variant_id"))
        return cls(product_id=item.product_id, variant_id=item.variant_id)

    @property
    def key(self) -> str:
        return self.variant_id or self.product_id


def _quantity_of(item: Any) -> int:
    return int(item["quantity"] if isinstance(item, dict) else item.quantity)


class StockLedger:
    """
    Applies signed quantity changes to product and variant stock.

    Keeps the invariant that a product with variants carries the sum of its
    variants' stock. Every call runs inside the caller's unit of work, so a
    failure on one line aborts the whole order.

    No floor is enforced here: stock may go negative. Sales check
    availability before they get this far.
    """

    def __init__(self, tx: UnitOfWork):
        self.tx = tx

    # ==================== LOOKUPS ====================

    def get_product(self, product_id: str) -> Row:
        product = self.tx.select_one("products", {"id": product_id})
        if not product:
            logger.error(f"Product not found: {product_id}")
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def get_variant(self, variant_id: str) -> Row:
        variant = self.tx.select_one("variants", {"id": variant_id})
        if not variant:
            logger.error(f"Variant not found: {variant_id}")
            raise NotFoundError(f"Variant {variant_id} not found")
        return variant

    def resolve(self, target: StockTarget) -> Tuple[Row, Optional[Row]]:
        """
        Load the product (and variant) a line refers to and check they fit
        together. Returns (product, variant_or_None).
        """
        if not target.product_id:
            raise ValidationError("Line item is missing product_id")

        product = self.get_product(target.product_id)

        if target.variant_id:
            variant = self.get_variant(target.variant_id)
            if variant["product_id"] != product["id"]:
                raise ValidationError(
                    f"Variant {variant['id']} does not belong to product {product['id']}"
                )
            return product, variant

        if product["has_variants"]:
            raise ValidationError(
                f"Product {product['name']} has variants; a variant must be selected"
            )
        return product, None

    # ==================== MUTATIONS ====================

    def recompute_product_stock(self, product_id: str) -> int:
        """Re-derive product stock from every variant row, not a running total."""
        variants = self.tx.select("variants", {"product_id": product_id})
        total = sum(int(v["stock"]) for v in variants)
        self.tx.update("products", {"id": product_id}, {"stock": total})
        logger.debug(f"Product {product_id} stock recomputed from {len(variants)} variants: {total}")
        return total

    def apply_delta(self, target: StockTarget, quantity_signed: int) -> int:
        """
        Add quantity_signed to the target's stock. Returns the new stock of
        the row that was changed (variant or product).
        """
        if target.variant_id:
            variant = self.get_variant(target.variant_id)
            before = int(variant["stock"])
            after = before + quantity_signed
            self.tx.update("variants", {"id": variant["id"]}, {"stock": after})

            # The owning product must exist for the aggregate to be written back
            self.get_product(variant["product_id"])
            product_stock = self.recompute_product_stock(variant["product_id"])

            logger.info(
                f"Stock updated - Variant: {variant['id']}, "
                f"Qty: {before} → {after}, Product {variant['product_id']} total: {product_stock}"
            )
            return after

        product = self.get_product(target.product_id)
        before = int(product["stock"])
        after = before + quantity_signed
        self.tx.update("products", {"id": product["id"]}, {"stock": after})

        logger.info(f"Stock updated - Product: {product['id']}, Qty: {before} → {after}")
        return after

    def apply_batch(self, items: Iterable[Any], direction: StockDirection) -> None:
        direction = StockDirection(direction)
        count = 0
        for item in items:
            self.apply_delta(StockTarget.of(item), direction.sign * _quantity_of(item))
            count += 1
        logger.debug(f"Applied stock batch: {count} lines, direction={direction.value}")
