"""Cart payload normalization.

Client-supplied lines are untrusted: each needs a product id and an integer
quantity, and lines naming the same product are merged before any price or
stock math so adjustments are computed once per product.
"""

from storefront.errors import InvalidCartError


def merge_lines(lines) -> list[dict]:
    """Sum quantities of lines that reference the same product, keeping first-seen order."""
    merged: dict[str, dict] = {}
    for line in lines:
        key = str(line["product_id"])
        if key in merged:
            merged[key]["quantity"] += line["quantity"]
        else:
            merged[key] = {**line, "product_id": key}
    return list(merged.values())


def parse_cart_lines(raw_lines, max_quantity=99) -> list[dict]:
    """Validate and merge ``[{product_id, quantity}, ...]``.

    Raises ``InvalidCartError`` naming the offending line index.
    """
    if not raw_lines:
        raise InvalidCartError("Cart is empty")

    lines = []
    for index, raw in enumerate(raw_lines):
        product_id = str(raw.get("product_id") or "").strip()
        quantity = raw.get("quantity")
        if not product_id:
            raise InvalidCartError(details={"line": index, "field": "product_id"})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidCartError(details={"line": index, "field": "quantity"})
        lines.append({"product_id": product_id, "quantity": quantity})

    merged = merge_lines(lines)
    for line in merged:
        if line["quantity"] > max_quantity:
            raise InvalidCartError(
                f"At most {max_quantity} units per product",
                {"product_id": line["product_id"], "quantity": line["quantity"], "max_quantity": max_quantity},
            )
    return merged
