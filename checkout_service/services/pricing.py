from decimal import Decimal
from typing import Iterable, Optional, Tuple

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")


def line_total(unit_price: Optional[Decimal], quantity: int) -> Decimal:
    """Позиция без цены считается бесплатной"""
    price = Decimal(str(unit_price)) if unit_price is not None else ZERO
    return (price * (quantity or 0)).quantize(CENTS)


def compute_totals(items: Iterable) -> Tuple[Decimal, Decimal, Decimal]:
    """subtotal, fees, total для позиций с unit_price и quantity"""
    subtotal = sum((line_total(item.unit_price, item.quantity) for item in items), ZERO)
    fees = ZERO  # Сборов пока нет
    return subtotal, fees, subtotal + fees
