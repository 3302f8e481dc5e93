"""Store-level checkout settings: tax rate and shipping zones.

Both are edited from the admin side and read at checkout time.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import InvalidCartError

GENERAL_SETTINGS_ID = "general"


@storefront.aggregate
class StoreSettings:
    settings_id = Identifier(identifier=True, required=True)
    tax_rate = Float(default=0.0, min_value=0.0, max_value=100.0)  # Percentage


@storefront.aggregate
class ShippingZone:
    name = String(required=True, max_length=100)
    charge_cents = Integer(required=True, min_value=0)


@dataclass(frozen=True)
class CheckoutTerms:
    tax_rate: float
    zone_charge_cents: int | None


def current_tax_rate() -> float:
    try:
        settings = current_domain.repository_for(StoreSettings).get(GENERAL_SETTINGS_ID)
    except ObjectNotFoundError:
        return 0.0
    return settings.tax_rate or 0.0


def shipping_zones() -> list[ShippingZone]:
    zones = current_domain.repository_for(ShippingZone)._dao.query.all().items
    return sorted(zones, key=lambda zone: zone.name)


def load_checkout_terms(shipping_zone_id=None) -> CheckoutTerms:
    """Tax rate plus the charge of the selected shipping zone, if any.

    An unknown zone id is a cart error rather than a silent fallback to the
    flat fee.
    """
    zone_charge = None
    if shipping_zone_id:
        try:
            zone = current_domain.repository_for(ShippingZone).get(shipping_zone_id)
        except ObjectNotFoundError:
            raise InvalidCartError(
                "Unknown shipping zone", {"shipping_zone_id": shipping_zone_id}, code="invalid_shipping_zone"
            )
        zone_charge = zone.charge_cents

    return CheckoutTerms(tax_rate=current_tax_rate(), zone_charge_cents=zone_charge)
