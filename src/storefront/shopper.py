"""The resolved identity of whoever is checking out.

Identity is resolved once at the edge (HTTP headers, CLI arguments) and
passed explicitly into cart and checkout operations.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Shopper:
    customer_id: str | None = None
    session_id: str | None = None

    @property
    def is_guest(self) -> bool:
        return not self.customer_id

    def owns(self, record) -> bool:
        """Whether a reservation/cart record belongs to this shopper."""
        if self.customer_id:
            return str(record.customer_id or "") == str(self.customer_id)
        return not record.customer_id and bool(self.session_id) and record.session_id == self.session_id

    def lookup(self) -> dict | None:
        """Filter kwargs selecting this shopper's rows, or None when nothing can match."""
        if self.customer_id:
            return {"customer_id": str(self.customer_id)}
        if self.session_id:
            return {"session_id": self.session_id}
        return None

    def as_log_context(self) -> dict:
        return {"customer_id": self.customer_id, "guest": self.is_guest}
