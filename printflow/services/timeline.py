"""Day-scoped projection of orders onto the 24-tick production timeline.

A :class:`TimelineViewModel` is built per request: ``load`` fetches every
order through the gateway and keeps the ones visible on the requested
day (all queued orders plus the orders placed on that day). Commands
change the projection first and then persist through the gateway; each
returns a :class:`CommandResult` so the caller chooses whether to roll
the projection back when the write fails.
"""
from flask import current_app

from printflow.constants import OrderStatus, PrintType, Timeline
from printflow.errors import ValidationError
from .order_service import OrderGateway


def tick_index(tick_id):
    """``'tick-5'`` -> ``5``; ``None`` for anything that is not a valid tick."""
    if tick_id not in Timeline.TICK_IDS:
        return None
    return int(tick_id[len(Timeline.TICK_PREFIX):])


def tick_label(index):
    return f"{index + 1}:00"


class Cube:
    """Schedulable unit of one order on the timeline."""

    def __init__(self, order):
        self.id = order.id
        # Legacy rows may carry '' or 'EMPTY'; anything outside the tick set is queued
        self.tick_id = order.timeline_position if order.timeline_position in Timeline.TICK_IDS else None
        self.timeline_date = order.timeline_date
        self.title = order.title
        self.external_no = order.order_no
        self.order_no = order.order_no if order.order_no else str(order.id)
        self.size = f"Qty: {order.quantity or 1}"
        self.type = order.type or PrintType.ROLAND
        self.completed = order.is_completed
        self.assigned_user_id = order.assigned_user_id
        self.customer_name = order.customer_name
        self.deadline = order.deadline
        self.order_data = order.to_dict()

    @property
    def placed(self):
        return self.tick_id is not None

    def to_dict(self):
        return {
            'id': self.id,
            'tickId': self.tick_id,
            'timelineDate': self.timeline_date.isoformat() if self.timeline_date else None,
            'title': self.title,
            'orderno': self.order_no,
            'size': self.size,
            'type': self.type,
            'completed': self.completed,
            'assignedUserId': self.assigned_user_id,
            'customerName': self.customer_name,
            'deadline': self.deadline.isoformat() if self.deadline else None,
        }


class CommandResult:
    REJECTED = 'rejected'
    PERSIST_FAILED = 'persist_failed'

    def __init__(self, ok, message=None, undo=None, reason=None, **data):
        self.ok = ok
        self.message = message
        self.reason = reason
        self.data = data
        self._undo = undo

    def rollback(self):
        """Revert the local change made by the command. Safe to call twice."""
        if self._undo is not None:
            self._undo()
            self._undo = None

    def to_dict(self):
        result = {'status': 'success' if self.ok else 'error'}
        if self.message:
            result['message'] = self.message
        result.update(self.data)
        return result


class SearchResult:
    NOT_FOUND = 'not_found'
    UNPLACED = 'unplaced'
    PLACED = 'placed'

    def __init__(self, state, cube=None, scroll_offset=None):
        self.state = state
        self.cube = cube
        self.scroll_offset = scroll_offset

    @property
    def message(self):
        if self.state == self.NOT_FOUND:
            return 'No order found with that number.'
        if self.state == self.UNPLACED:
            return 'Order found but not yet placed on the timeline.'
        return 'Order found.'

    def to_dict(self):
        data = {'state': self.state, 'message': self.message}
        if self.cube is not None:
            data['order'] = self.cube.to_dict()
            data['date'] = self.cube.timeline_date.isoformat() if self.cube.timeline_date else None
        if self.state == self.PLACED:
            data['tickIndex'] = tick_index(self.cube.tick_id)
            data['scrollOffset'] = self.scroll_offset
        return data


class TimelineViewModel:

    def __init__(self, gateway=OrderGateway, tick_width=150):
        self.gateway = gateway
        self.tick_width = tick_width
        self.date = None
        self.cubes = []
        self.assignments = {}
        self.active_filters = []
        self._all_cubes = []

    # --- projection -------------------------------------------------------

    def load(self, date):
        self.date = date
        result = self.gateway.fetch_orders()

        if result.get('status') != 'success' or not result.get('orders'):
            if result.get('status') != 'success':
                current_app.logger.warning(f"Timeline load for {date} failed: {result.get('message')}")
            self._all_cubes = []
            self.cubes = []
            self.assignments = {}
            return self

        self._all_cubes = [Cube(order) for order in result['orders']]
        self.cubes = [
            c for c in self._all_cubes
            if c.tick_id is None or c.timeline_date == date
        ]
        self.assignments = {
            c.id: c.assigned_user_id for c in self.cubes if c.assigned_user_id
        }
        return self

    def get_cube(self, order_id):
        for cube in self.cubes:
            if cube.id == order_id:
                return cube
        return None

    def filter_by_type(self, types):
        types = list(types or [])
        unknown = [t for t in types if t not in PrintType.ALL]
        if unknown:
            raise ValidationError(f"Unknown order type(s): {', '.join(unknown)}")
        self.active_filters = types
        return self.filtered_cubes()

    def filtered_cubes(self):
        if not self.active_filters:
            return list(self.cubes)
        return [c for c in self.cubes if c.type in self.active_filters]

    def queue(self):
        return [c for c in self.filtered_cubes() if c.tick_id is None]

    def ticks(self):
        visible = self.filtered_cubes()
        buckets = []
        for i, tick_id in enumerate(Timeline.TICK_IDS):
            buckets.append({
                'id': tick_id,
                'label': tick_label(i),
                'cubes': [c for c in visible if c.tick_id == tick_id],
            })
        return buckets

    def summary(self):
        visible = self.filtered_cubes()
        return {
            'total': len(visible),
            'completed': len([c for c in visible if c.completed]),
            'missed': len([c for c in visible if not c.completed]),
            'in_progress': len([c for c in visible if not c.completed and c.placed]),
        }

    def type_counts(self):
        return {t: len([c for c in self.cubes if c.type == t]) for t in PrintType.ALL}

    def remove(self, order_id):
        """Hide a cube from this projection. The order itself stays in the store."""
        before = len(self.cubes)
        self.cubes = [c for c in self.cubes if c.id != order_id]
        self.assignments.pop(order_id, None)
        return len(self.cubes) != before

    # --- commands ---------------------------------------------------------

    def move_to_tick(self, order_id, tick_id):
        if tick_index(tick_id) is None:
            return CommandResult(False, f'Invalid tick: {tick_id}', reason=CommandResult.REJECTED)

        cube = self.get_cube(order_id)
        if cube is None:
            return CommandResult(False, 'Order is not on this timeline.', reason=CommandResult.REJECTED)
        # Completed is terminal: the order keeps its tick and day
        if cube.completed:
            return CommandResult(False, 'Completed orders cannot be moved.', reason=CommandResult.REJECTED)

        prev_tick, prev_date = cube.tick_id, cube.timeline_date

        def undo():
            cube.tick_id = prev_tick
            cube.timeline_date = prev_date

        cube.tick_id = tick_id
        cube.timeline_date = self.date

        result = self.gateway.update_position(order_id, tick_id, self.date)
        if result.get('status') != 'success':
            return CommandResult(False, result.get('message', 'Failed to update position'), undo=undo,
                                 reason=CommandResult.PERSIST_FAILED)
        return CommandResult(True, undo=undo, tickId=tick_id, date=self.date.isoformat())

    def least_loaded_tick(self):
        counts = {tick_id: 0 for tick_id in Timeline.TICK_IDS}
        for c in self.cubes:
            if c.tick_id in counts:
                counts[c.tick_id] += 1
        # min() keeps the first minimum, so ties go to the lowest tick index
        return min(Timeline.TICK_IDS, key=lambda t: counts[t])

    def move_to_least_loaded_tick(self, order_id):
        cube = self.get_cube(order_id)
        if cube is None:
            return CommandResult(False, 'Order is not on this timeline.', reason=CommandResult.REJECTED)
        if cube.completed:
            return CommandResult(False, 'Completed orders cannot be moved.', reason=CommandResult.REJECTED)
        return self.move_to_tick(order_id, self.least_loaded_tick())

    def mark_complete(self, order_id):
        cube = self.get_cube(order_id)
        if cube is None:
            return CommandResult(False, 'Order is not on this timeline.', reason=CommandResult.REJECTED)

        prev = cube.completed

        def undo():
            cube.completed = prev

        cube.completed = True
        result = self.gateway.update_status(order_id, OrderStatus.COMPLETED)
        if result.get('status') != 'success':
            return CommandResult(False, result.get('message', 'Failed to update status'), undo=undo,
                                 reason=CommandResult.PERSIST_FAILED)
        return CommandResult(True, undo=undo)

    def assign(self, order_id, user_id):
        cube = self.get_cube(order_id)
        if cube is None:
            return CommandResult(False, 'Order is not on this timeline.', reason=CommandResult.REJECTED)

        had_entry = order_id in self.assignments
        prev = self.assignments.get(order_id)
        prev_cube_user = cube.assigned_user_id

        def undo():
            cube.assigned_user_id = prev_cube_user
            if had_entry:
                self.assignments[order_id] = prev
            else:
                self.assignments.pop(order_id, None)

        if user_id is None:
            self.assignments.pop(order_id, None)
        else:
            self.assignments[order_id] = user_id
        cube.assigned_user_id = user_id

        result = self.gateway.assign_user(order_id, user_id)
        if result.get('status') != 'success':
            return CommandResult(False, result.get('message', 'Failed to assign user'), undo=undo,
                                 reason=CommandResult.PERSIST_FAILED)
        return CommandResult(True, undo=undo, assignedUserId=user_id)

    # --- lookup -----------------------------------------------------------

    def search(self, order_no):
        order_no = str(order_no or '').strip()
        if not order_no:
            raise ValidationError('Order number is required.')

        # Searches everything fetched, not only the day's projection
        match = next((c for c in self._all_cubes if c.external_no == order_no), None)
        if match is None:
            return SearchResult(SearchResult.NOT_FOUND)
        if match.tick_id is None:
            return SearchResult(SearchResult.UNPLACED, match)
        return SearchResult(SearchResult.PLACED, match, tick_index(match.tick_id) * self.tick_width)

    def to_dict(self):
        return {
            'date': self.date.isoformat() if self.date else None,
            'filters': self.active_filters,
            'types': self.type_counts(),
            'summary': self.summary(),
            'queue': [c.to_dict() for c in self.queue()],
            'ticks': [
                {'id': t['id'], 'label': t['label'], 'cubes': [c.to_dict() for c in t['cubes']]}
                for t in self.ticks()
            ],
            'assignments': {str(k): v for k, v in self.assignments.items()},
        }
