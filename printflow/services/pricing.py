from decimal import Decimal, ROUND_HALF_UP

from printflow.constants import DiscountType

CENT = Decimal('0.01')


def to_money(value):
    if value is None:
        return Decimal('0.00')
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_subtotal(option_prices, quantity):
    """Sum of the chosen option prices times the quantity."""
    if quantity < 1:
        raise ValueError('Quantity must be at least 1')
    return to_money(sum((to_money(p) for p in option_prices), Decimal('0')) * quantity)


def calculate_discount(subtotal, discount_type, amount):
    subtotal = to_money(subtotal)
    amount = to_money(amount)
    if discount_type == DiscountType.PERCENTAGE:
        discount = subtotal * amount / Decimal('100')
    elif discount_type == DiscountType.FIXED:
        discount = amount
    else:
        raise ValueError(f'Unknown discount type: {discount_type}')
    # Never discount more than the subtotal
    return to_money(min(discount, subtotal))


def calculate_total(option_prices, quantity, discount_type=None, discount_amount=None):
    subtotal = calculate_subtotal(option_prices, quantity)
    discount = Decimal('0.00')
    if discount_type is not None:
        discount = calculate_discount(subtotal, discount_type, discount_amount)
    total = max(Decimal('0.00'), subtotal - discount)
    return {
        'subtotal': subtotal,
        'discount': discount,
        'total': to_money(total),
    }
