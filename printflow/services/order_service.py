import traceback
from datetime import datetime
from flask import current_app
from sqlalchemy.orm import selectinload, joinedload

from printflow.extensions import db
from printflow.models import Order, OrderItem, OrderItemOption, ProductMenuOption, User
from printflow.constants import OrderStatus, PrintType, Timeline


class OrderGateway:
    """Translates timeline intents into order table reads and writes.

    Every method returns a result dict ``{'status': 'success' | 'error', ...}``
    and rolls the session back on failure; nothing here retries.
    """

    @staticmethod
    def fetch_orders():
        try:
            orders = Order.query.options(
                selectinload(Order.items).joinedload(OrderItem.product),
                selectinload(Order.items).selectinload(OrderItem.options)
                    .joinedload(OrderItemOption.option).joinedload(ProductMenuOption.menu),
            ).order_by(Order.created_at.desc(), Order.id.desc()).all()
            return {'status': 'success', 'orders': orders}
        except Exception as e:
            current_app.logger.error(f"fetch_orders error: {e}")
            traceback.print_exc()
            return {'status': 'error', 'message': str(e)}

    @staticmethod
    def create_order(user_id, order_no, customer_name, order_type, deadline=None):
        if order_type not in PrintType.ALL:
            return {'status': 'error', 'message': f'Unknown order type: {order_type}'}
        try:
            order = Order(
                user_id=user_id,
                order_no=str(order_no).strip() if order_no is not None else None,
                customer_name=customer_name,
                type=order_type,
                status=OrderStatus.PENDING,
                timeline_position=None,
                timeline_date=None,
                deadline=deadline,
            )
            db.session.add(order)
            db.session.commit()
            current_app.logger.info(f"Order created: id={order.id} order_no={order.order_no}")
            return {'status': 'success', 'order': order}
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"create_order error: {e}")
            traceback.print_exc()
            return {'status': 'error', 'message': str(e)}

    @staticmethod
    def update_position(order_id, tick_id, timeline_date):
        if tick_id is not None and tick_id not in Timeline.TICK_IDS:
            return {'status': 'error', 'message': f'Invalid tick: {tick_id}'}
        try:
            order = db.session.get(Order, order_id)
            if not order:
                return {'status': 'error', 'message': 'Order not found'}
            order.timeline_position = tick_id
            order.timeline_date = timeline_date
            db.session.commit()
            return {'status': 'success'}
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"update_position error: {e}")
            traceback.print_exc()
            return {'status': 'error', 'message': str(e)}

    @staticmethod
    def update_status(order_id, status):
        if status not in OrderStatus.ALL:
            return {'status': 'error', 'message': f'Unknown status: {status}'}
        try:
            order = db.session.get(Order, order_id)
            if not order:
                return {'status': 'error', 'message': 'Order not found'}
            order.status = status
            if status == OrderStatus.COMPLETED and not order.completed_at:
                order.completed_at = datetime.utcnow()
            db.session.commit()
            return {'status': 'success'}
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"update_status error: {e}")
            traceback.print_exc()
            return {'status': 'error', 'message': str(e)}

    @staticmethod
    def assign_user(order_id, user_id):
        try:
            order = db.session.get(Order, order_id)
            if not order:
                return {'status': 'error', 'message': 'Order not found'}
            if user_id is not None and not db.session.get(User, user_id):
                return {'status': 'error', 'message': 'User not found'}
            order.assigned_user_id = user_id
            db.session.commit()
            return {'status': 'success'}
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"assign_user error: {e}")
            traceback.print_exc()
            return {'status': 'error', 'message': str(e)}

    @staticmethod
    def get_order_detail(order_id):
        order = Order.query.options(
            selectinload(Order.items).joinedload(OrderItem.product),
            joinedload(Order.discount_code),
            joinedload(Order.assigned_user),
        ).filter(Order.id == order_id).first()
        if not order:
            return None

        detail = order.to_dict()
        detail['title'] = order.title
        detail['discount_code'] = order.discount_code.code if order.discount_code else None
        detail['assigned_user'] = order.assigned_user.to_dict() if order.assigned_user else None
        return detail
