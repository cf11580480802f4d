from datetime import datetime, timezone

from printflow.extensions import db
from printflow.constants import DiscountType, DiscountMode

def _naive_utc(value):
    """Aware values are converted to UTC; naive ones are already UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

class DiscountCode(db.Model):
    __tablename__ = 'discount_codes'
    id = db.Column(db.Integer, primary_key=True)
    # Uniqueness lives here; services treat IntegrityError as "duplicate"
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    type = db.Column(db.String(20), nullable=False, default=DiscountType.FIXED)
    mode = db.Column(db.String(20), nullable=False, default=DiscountMode.AUTO)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    expiration_date = db.Column(db.DateTime(timezone=True), nullable=False)
    use_limit = db.Column(db.Integer, nullable=False, default=1)
    times_used = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=datetime.utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = db.relationship('Order', back_populates='discount_code', lazy='dynamic')

    def is_expired(self, now=None):
        return _naive_utc(self.expiration_date) < _naive_utc(now or datetime.utcnow())

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'type': self.type,
            'mode': self.mode,
            'amount': float(self.amount),
            'expiration_date': self.expiration_date.isoformat() if self.expiration_date else None,
            'use_limit': self.use_limit,
            'times_used': self.times_used,
            'is_active': self.is_active,
            'is_expired': self.is_expired(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
