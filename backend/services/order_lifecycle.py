from utils.exceptions import InvalidTransition

ORDER_STATUSES = (
    'pending',
    'processing',
    'confirmed',
    'shipped',
    'delivered',
    'cancelled',
    'returned',
)

# Explicit allowed state transitions
ALLOWED_ORDER_TRANSITIONS = {
    'pending': {'processing', 'confirmed', 'cancelled'},
    'processing': {'confirmed', 'shipped', 'cancelled'},
    'confirmed': {'shipped', 'delivered', 'cancelled'},
    'shipped': {'delivered', 'returned', 'cancelled'},
    'delivered': {'returned'},
    'cancelled': set(),
    'returned': set(),
}

def can_transition(from_status, to_status):
    if from_status == to_status:
        return True
    return to_status in ALLOWED_ORDER_TRANSITIONS.get(from_status, set())

def assert_order_transition(from_status, to_status):
    """Single source of truth for order status changes"""
    if to_status not in ORDER_STATUSES:
        raise InvalidTransition(f"Unknown order status: {to_status}")
    if not can_transition(from_status, to_status):
        raise InvalidTransition(f"Illegal order transition: {from_status} -> {to_status}")
