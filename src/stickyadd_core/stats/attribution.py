"""Order attribution for the sticky bar.

The storefront bar adds a hidden line item property
``_attribution: stickyadd`` when it puts a product in the cart. Revenue of
an order is attributed line by line: price x quantity of tagged lines.
"""
import logging
import math

from ..schemas.shop import OrderAttribution


logger = logging.getLogger(__name__)


ATTRIBUTION_PROPERTY = "_attribution"
ATTRIBUTION_VALUE = "stickyadd"


def is_attributed_line(line_item: dict) -> bool:
    """True if the line item carries the sticky bar attribution property."""
    properties = line_item.get("properties")
    if not isinstance(properties, list):
        return False

    return any(
        isinstance(prop, dict)
        and prop.get("name") == ATTRIBUTION_PROPERTY
        and prop.get("value") == ATTRIBUTION_VALUE
        for prop in properties
    )


def line_revenue(line_item: dict) -> float:
    """price x quantity (price arrives as a decimal string).

    Raises:
        ValueError: For unparseable or non-finite prices
    """
    price = float(line_item.get("price"))
    if not math.isfinite(price):
        raise ValueError(f"non-finite price: {line_item.get('price')!r}")
    return price * int(line_item.get("quantity", 0))


def attribute_order(order: dict) -> OrderAttribution:
    """Compute sticky bar attribution for an orders/create webhook payload.

    Args:
        order: REST order payload (line_items[].properties, price, quantity)

    Returns:
        OrderAttribution (has_attribution False when no line is tagged)
    """
    order_id = order.get("id")
    attribution = OrderAttribution(
        order_id=str(order_id) if order_id is not None else None
    )

    line_items = order.get("line_items")
    if not isinstance(line_items, list):
        return attribution

    for item in line_items:
        if not isinstance(item, dict) or not is_attributed_line(item):
            continue

        try:
            revenue = line_revenue(item)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "Skipping attributed line item %s on order %s: %s",
                item.get("id"),
                order_id,
                exc,
            )
            continue

        attribution.has_attribution = True
        attribution.revenue += revenue
        attribution.line_count += 1

    attribution.revenue = round(attribution.revenue, 2)
    return attribution
