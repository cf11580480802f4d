from printflow.constants import Timeline
from printflow.models import Order
from .timeline import tick_index, tick_label


class TrackingResult:
    NOT_FOUND = 'not_found'
    UNPLACED = 'unplaced'
    UNSCHEDULED = 'unscheduled'
    FOUND = 'found'

    MESSAGES = {
        NOT_FOUND: 'No order found with that number.',
        UNPLACED: 'Order found but not yet placed on the timeline.',
        UNSCHEDULED: 'Order found but has no scheduled date.',
        FOUND: 'Order found.',
    }

    def __init__(self, state, order=None):
        self.state = state
        self.order = order

    def to_dict(self):
        data = {'state': self.state, 'message': self.MESSAGES[self.state]}
        if self.state == self.FOUND:
            order = self.order
            index = tick_index(order.timeline_position)
            data['order'] = {
                'orderno': order.order_no,
                'title': order.title,
                'type': order.type,
                'customerName': order.customer_name,
                'quantity': order.quantity,
                'status': order.status,
                'statusLabel': 'Completed' if order.is_completed else 'In Progress',
                'date': order.timeline_date.isoformat(),
                'tickId': order.timeline_position,
                'slot': tick_label(index),
                'completedAt': order.completed_at.isoformat() if order.completed_at else None,
            }
        return data


def track_order(order_no):
    """Customer-facing lookup of an order's place on the production timeline."""
    order_no = str(order_no or '').strip()
    order = Order.query.filter(Order.order_no == order_no).order_by(Order.created_at.desc()).first() if order_no else None

    if order is None:
        return TrackingResult(TrackingResult.NOT_FOUND)
    if order.timeline_position not in Timeline.TICK_IDS:
        return TrackingResult(TrackingResult.UNPLACED, order)
    if not order.timeline_date:
        return TrackingResult(TrackingResult.UNSCHEDULED, order)
    return TrackingResult(TrackingResult.FOUND, order)
