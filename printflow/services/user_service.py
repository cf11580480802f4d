import traceback
from flask import current_app
from sqlalchemy import exc

from printflow.extensions import db
from printflow.models import User, Order
from printflow.constants import Role, PrintType
from printflow.errors import NotFoundError, ValidationError


class UserService:

    @staticmethod
    def list_users():
        return User.query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def create_user(email, password, name, role, user_type=None):
        email = (email or '').strip().lower()
        name = (name or '').strip()
        if not all([email, password, name]):
            raise ValidationError('Email, password and name are required.')
        if role not in Role.ALL:
            raise ValidationError(f'Role must be one of {", ".join(Role.ALL)}.')

        # Only operators run a specific print line
        if role == Role.OPERATOR:
            if user_type not in PrintType.ALL:
                raise ValidationError('Please select a type for the Operator role.')
        else:
            user_type = None

        user = User(email=email, name=name, role=role, type=user_type)
        user.set_password(password)
        try:
            db.session.add(user)
            db.session.commit()
            current_app.logger.info(f"User created: {email} ({role})")
            return user
        except exc.IntegrityError:
            db.session.rollback()
            raise ValidationError('A user with this email address has already been registered.')

    @staticmethod
    def delete_user(user_id):
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError('User not found.')
        try:
            # SET NULL at the FK level too; SQLite does not enforce it without PRAGMA
            Order.query.filter(Order.assigned_user_id == user_id).update(
                {Order.assigned_user_id: None}, synchronize_session=False
            )
            Order.query.filter(Order.user_id == user_id).update(
                {Order.user_id: None}, synchronize_session=False
            )
            db.session.delete(user)
            db.session.commit()
            current_app.logger.info(f"User deleted: {user_id}")
        except Exception:
            db.session.rollback()
            traceback.print_exc()
            raise

    @staticmethod
    def authenticate(email, password):
        user = User.query.filter_by(email=(email or '').strip().lower()).first()
        if user and password and user.check_password(password):
            return user
        return None
