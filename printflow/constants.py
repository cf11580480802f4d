class OrderStatus:
    """Order status values"""
    PENDING = 'pending'
    COMPLETED = 'completed'

    ALL = [PENDING, COMPLETED]

class PrintType:
    """Production line an order (and a product) belongs to"""
    ROLAND = 'Roland'
    DIGITAL = 'Digital'
    SIGN = 'Sign'
    LASER = 'Laser'
    WOOD = 'Wood'
    REPRINT = 'Reprint'

    # Order matters: filter buttons and exports follow it
    ALL = [ROLAND, DIGITAL, SIGN, LASER, WOOD, REPRINT]

class Role:
    """Staff roles"""
    ADMIN = 'Admin'
    DESIGNER = 'Designer'
    OPERATOR = 'Operator'
    MANAGER = 'Manager'

    ALL = [ADMIN, DESIGNER, OPERATOR, MANAGER]

class DiscountType:
    FIXED = 'Fixed'
    PERCENTAGE = 'Percentage'

    ALL = [FIXED, PERCENTAGE]

class DiscountMode:
    AUTO = 'Auto'      # code generated by the system
    MANUAL = 'Manual'  # code typed in by staff

    ALL = [AUTO, MANUAL]

_TICK_COUNT = 24
_TICK_PREFIX = 'tick-'

class Timeline:
    """Fixed hourly slots of a timeline day"""
    TICK_COUNT = _TICK_COUNT
    TICK_PREFIX = _TICK_PREFIX
    TICK_IDS = [f'{_TICK_PREFIX}{i}' for i in range(_TICK_COUNT)]
