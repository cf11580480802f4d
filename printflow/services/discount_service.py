import secrets
import string
import traceback
from datetime import datetime
from decimal import Decimal, InvalidOperation
from flask import current_app
from sqlalchemy import exc, update

from printflow.extensions import db
from printflow.models import DiscountCode, Order
from printflow.constants import DiscountType, DiscountMode
from printflow.errors import DuplicateCodeError, DiscountInvalidError, NotFoundError, ValidationError

CODE_ALPHABET = string.ascii_uppercase + string.digits
AUTO_CODE_ATTEMPTS = 5


def normalize_code(code):
    return (code or '').strip().upper()


def generate_code(length=8):
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class DiscountService:

    @staticmethod
    def _validate_fields(discount_type, mode, amount, expiration_date, use_limit):
        if discount_type not in DiscountType.ALL:
            raise ValidationError(f'Discount type must be one of {", ".join(DiscountType.ALL)}.')
        if mode not in DiscountMode.ALL:
            raise ValidationError(f'Discount mode must be one of {", ".join(DiscountMode.ALL)}.')
        try:
            amount = Decimal(str(amount))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError('Amount must be a number.')
        if not amount.is_finite():
            raise ValidationError('Amount must be a number.')
        if amount <= 0:
            raise ValidationError('Amount must be greater than zero.')
        if discount_type == DiscountType.PERCENTAGE and amount > 100:
            raise ValidationError('A percentage discount cannot exceed 100.')
        if not isinstance(expiration_date, datetime):
            raise ValidationError('Expiration date is required.')
        try:
            use_limit = int(use_limit)
        except (TypeError, ValueError):
            raise ValidationError('Use limit must be an integer.')
        if use_limit < 0:
            raise ValidationError('Use limit cannot be negative.')
        return amount, use_limit

    @staticmethod
    def create_code(code, discount_type, mode, amount, expiration_date, use_limit):
        """Insert a discount code. The UNIQUE constraint decides duplicates."""
        amount, use_limit = DiscountService._validate_fields(
            discount_type, mode, amount, expiration_date, use_limit
        )

        if mode == DiscountMode.MANUAL:
            code = normalize_code(code)
            if not code:
                raise ValidationError('A manual discount code needs a code.')
            attempts = 1
        else:
            attempts = AUTO_CODE_ATTEMPTS

        length = current_app.config.get('DISCOUNT_CODE_LENGTH', 8)
        for _ in range(attempts):
            candidate = code if mode == DiscountMode.MANUAL else generate_code(length)
            row = DiscountCode(
                code=candidate,
                type=discount_type,
                mode=mode,
                amount=amount,
                expiration_date=expiration_date,
                use_limit=use_limit,
                times_used=0,
                is_active=True,
            )
            try:
                db.session.add(row)
                db.session.commit()
                current_app.logger.info(f"Discount code created: {candidate} ({mode})")
                return row
            except exc.IntegrityError:
                db.session.rollback()
                current_app.logger.info(f"Discount code collision: {candidate}")
                last = candidate

        raise DuplicateCodeError(last)

    @staticmethod
    def list_codes(now=None):
        now = now or datetime.utcnow()
        codes = DiscountCode.query.order_by(DiscountCode.created_at.desc(), DiscountCode.id.desc()).all()
        stats = {
            'total': len(codes),
            'active': len([c for c in codes if c.is_active]),
            'expired': len([c for c in codes if c.is_expired(now)]),
        }
        return codes, stats

    @staticmethod
    def toggle_active(code_id):
        row = db.session.get(DiscountCode, code_id)
        if not row:
            raise NotFoundError('Discount code not found.')
        try:
            row.is_active = not row.is_active
            db.session.commit()
            return row
        except Exception:
            db.session.rollback()
            traceback.print_exc()
            raise

    @staticmethod
    def delete_code(code_id, confirm=False):
        if not confirm:
            raise ValidationError('Deleting a discount code is permanent and must be confirmed.')
        row = db.session.get(DiscountCode, code_id)
        if not row:
            raise NotFoundError('Discount code not found.')
        code = row.code
        try:
            # Detach orders first so none points at a deleted code
            detached = Order.query.filter(Order.discount_code_id == code_id).update(
                {Order.discount_code_id: None}, synchronize_session=False
            )
            db.session.delete(row)
            db.session.commit()
            current_app.logger.info(f"Discount code {code} deleted, {detached} order(s) detached")
            return detached
        except Exception:
            db.session.rollback()
            traceback.print_exc()
            raise

    @staticmethod
    def validate(code, now=None):
        """Apply-time check. Returns the code row or raises DiscountInvalidError."""
        now = now or datetime.utcnow()
        code = normalize_code(code)
        if not code:
            raise DiscountInvalidError('Please enter a discount code.', 'missing')

        row = DiscountCode.query.filter_by(code=code).first()
        if not row:
            raise DiscountInvalidError('Invalid discount code.', 'not_found')
        if not row.is_active:
            raise DiscountInvalidError('This discount code is no longer active.', 'inactive')
        if row.is_expired(now):
            raise DiscountInvalidError('This discount code has expired.', 'expired')
        if row.times_used >= row.use_limit:
            raise DiscountInvalidError('This discount code has reached its usage limit.', 'exhausted')
        return row

    @staticmethod
    def redeem(code_id):
        """Count one use inside the caller's transaction; refuses once the limit is reached."""
        result = db.session.execute(
            update(DiscountCode)
            .where(
                DiscountCode.id == code_id,
                DiscountCode.is_active.is_(True),
                DiscountCode.times_used < DiscountCode.use_limit,
            )
            .values(times_used=DiscountCode.times_used + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise DiscountInvalidError('This discount code has reached its usage limit.', 'exhausted')

    @staticmethod
    def deactivate_expired(now=None):
        now = now or datetime.utcnow()
        try:
            result = db.session.execute(
                update(DiscountCode)
                .where(DiscountCode.is_active.is_(True), DiscountCode.expiration_date < now)
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
            return result.rowcount
        except Exception:
            db.session.rollback()
            traceback.print_exc()
            raise
