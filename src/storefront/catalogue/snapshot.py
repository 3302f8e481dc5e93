"""Catalog snapshot reader.

Reads authoritative name/price/image/stock for every product a cart
references, at the instant of checkout. Snapshots are plain frozen records;
they are never written back.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.errors import InvalidCartError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProductSnapshot:
    id: str
    name: str
    unit_price_cents: int
    image: str | None
    available_stock: int

    @classmethod
    def from_product(cls, product: Product) -> "ProductSnapshot":
        return cls(
            id=str(product.id),
            name=product.name,
            unit_price_cents=product.price_cents,
            image=product.image,
            available_stock=product.stock,
        )


def read_product_snapshots(product_ids) -> dict[str, ProductSnapshot]:
    """Fetch snapshots for a set of product ids in one query.

    Raises ``InvalidCartError`` if any id does not resolve; checkout never
    proceeds with only the valid subset of a cart.
    """
    wanted = {str(pid) for pid in product_ids}
    if not wanted:
        raise InvalidCartError("Cart is empty")

    products = current_domain.repository_for(Product)._dao.query.filter(id__in=list(wanted)).all().items
    snapshots = {str(p.id): ProductSnapshot.from_product(p) for p in products}

    missing = sorted(wanted - snapshots.keys())
    if missing:
        logger.warning("Cart references unknown products", missing=missing)
        raise InvalidCartError(details={"unknown_product_ids": missing})

    return snapshots
