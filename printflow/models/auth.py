from datetime import datetime
import bcrypt
from flask_login import UserMixin
from sqlalchemy import CheckConstraint

from printflow.extensions import db
from printflow.constants import Role

class User(db.Model, UserMixin):
    """Staff account: login identity and profile in one row."""
    __tablename__ = 'users'
    __table_args__ = (
        CheckConstraint(
            "(role = 'Operator' AND type IS NOT NULL) OR (role != 'Operator' AND type IS NULL)",
            name='user_operator_type_check'
        ),
    )
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(50), nullable=False, default=Role.DESIGNER, index=True)
    # Print line an operator runs; only set for operators
    type = db.Column(db.String(50), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=datetime.utcnow)

    assigned_orders = db.relationship('Order', back_populates='assigned_user', lazy='dynamic',
                                      foreign_keys='Order.assigned_user_id')

    def set_password(self, password):
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password):
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'type': self.type,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
