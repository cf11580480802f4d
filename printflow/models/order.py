from datetime import datetime
from sqlalchemy import Index

from printflow.extensions import db
from printflow.constants import OrderStatus, PrintType

class Order(db.Model):
    __tablename__ = 'orders'
    __table_args__ = (
        Index('ix_order_created', 'created_at'),
        Index('ix_order_timeline', 'timeline_date', 'timeline_position'),
    )
    id = db.Column(db.Integer, primary_key=True)
    order_no = db.Column(db.String(50), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    type = db.Column(db.String(50), nullable=False, default=PrintType.ROLAND, index=True)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING, index=True)
    price = db.Column(db.Numeric(10, 2), nullable=True)
    quantity = db.Column(db.Integer, nullable=True)

    # NULL position = still in the queue; a placed order belongs to timeline_date only
    timeline_position = db.Column(db.String(10), nullable=True)
    timeline_date = db.Column(db.Date, nullable=True)
    deadline = db.Column(db.DateTime(timezone=True), nullable=True)

    assigned_user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    discount_code_id = db.Column(db.Integer, db.ForeignKey('discount_codes.id', ondelete='SET NULL'), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), default=datetime.utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True, onupdate=datetime.utcnow)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    items = db.relationship('OrderItem', back_populates='order', cascade="all, delete-orphan", order_by='OrderItem.id')
    assigned_user = db.relationship('User', back_populates='assigned_orders', foreign_keys=[assigned_user_id])
    creator = db.relationship('User', foreign_keys=[user_id])
    discount_code = db.relationship('DiscountCode', back_populates='orders')

    @property
    def is_completed(self):
        return self.status == OrderStatus.COMPLETED

    @property
    def title(self):
        if self.items and self.items[0].product:
            return self.items[0].product.name
        return 'Order'

    def to_dict(self, with_items=True):
        data = {
            'id': self.id,
            'order_no': self.order_no,
            'customer_name': self.customer_name,
            'user_id': self.user_id,
            'type': self.type,
            'status': self.status,
            'price': float(self.price) if self.price is not None else None,
            'quantity': self.quantity,
            'timeline_position': self.timeline_position,
            'timeline_date': self.timeline_date.isoformat() if self.timeline_date else None,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'assigned_user_id': self.assigned_user_id,
            'discount_code_id': self.discount_code_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }
        if with_items:
            data['order_items'] = [item.to_dict() for item in self.items]
        return data

class OrderItem(db.Model):
    __tablename__ = 'order_items'
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete='SET NULL'), nullable=True)

    order = db.relationship('Order', back_populates='items')
    product = db.relationship('Product')
    options = db.relationship('OrderItemOption', back_populates='order_item', cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'products': {'name': self.product.name, 'type': self.product.type} if self.product else None,
            'options': [o.to_dict() for o in self.options],
        }

class OrderItemOption(db.Model):
    """Which option was chosen for one menu of the ordered product."""
    __tablename__ = 'order_item_options'
    id = db.Column(db.Integer, primary_key=True)
    order_item_id = db.Column(db.Integer, db.ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False, index=True)
    product_menu_option_id = db.Column(db.Integer, db.ForeignKey('product_menu_options.id', ondelete='SET NULL'), nullable=True)

    order_item = db.relationship('OrderItem', back_populates='options')
    option = db.relationship('ProductMenuOption')

    def to_dict(self):
        opt = self.option
        return {
            'id': self.id,
            'product_menu_option_id': self.product_menu_option_id,
            'menu_name': opt.menu.name if opt and opt.menu else None,
            'option_name': opt.option_name if opt else None,
            'price': float(opt.price) if opt and opt.price is not None else None,
        }
