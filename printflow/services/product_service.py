import traceback
from decimal import Decimal, InvalidOperation
from sqlalchemy.orm import selectinload
from flask import current_app

from printflow.extensions import db, cache
from printflow.models import Product, ProductMenu, ProductMenuOption
from printflow.constants import PrintType
from printflow.errors import NotFoundError, ValidationError


def _product_cache_key(product_id):
    return f'product_detail_{product_id}'


def _to_price(value, label):
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'{label} must be a number.')
    if not price.is_finite():
        raise ValidationError(f'{label} must be a number.')
    if price < 0:
        raise ValidationError(f'{label} cannot be negative.')
    return price


class ProductService:
    @staticmethod
    def list_products():
        return Product.query.order_by(Product.name).all()

    @staticmethod
    def load_product(product_id):
        """Product with its menus and options, straight from the database."""
        return Product.query.options(
            selectinload(Product.menus).selectinload(ProductMenu.options)
        ).filter(Product.id == product_id).first()

    @staticmethod
    def get_product_detail(product_id):
        key = _product_cache_key(product_id)
        try:
            cached = cache.get(key)
        except Exception:
            # Cache backend down: fall through to the database
            cached = None
        if cached:
            return cached

        try:
            product = ProductService.load_product(product_id)
            if not product:
                return None
            detail = product.to_dict()
            try:
                cache.set(key, detail)
            except Exception:
                pass
            return detail
        except Exception as e:
            current_app.logger.error(f"Error in ProductService.get_product_detail: {e}")
            traceback.print_exc()
            raise e

    @staticmethod
    def create_product(name, product_type, menus=None, base_price=None, image_url=None):
        name = (name or '').strip()
        if not name:
            raise ValidationError('Product name is required.')
        if product_type not in PrintType.ALL:
            raise ValidationError(f'Product type must be one of {", ".join(PrintType.ALL)}.')

        product = Product(
            name=name,
            type=product_type,
            image_url=image_url,
            base_price=_to_price(base_price, 'Base price') if base_price is not None else None,
        )
        for menu_data in menus or []:
            menu_name = (menu_data.get('name') or '').strip()
            if not menu_name:
                raise ValidationError('Every menu needs a name.')
            menu = ProductMenu(name=menu_name)
            options = menu_data.get('options') or []
            if not options:
                raise ValidationError(f"Menu '{menu_name}' has no options.")
            for opt in options:
                option_name = (opt.get('option_name') or '').strip()
                if not option_name:
                    raise ValidationError(f"An option in menu '{menu_name}' has no name.")
                menu.options.append(ProductMenuOption(
                    option_name=option_name,
                    price=_to_price(opt.get('price', 0), f"Price of '{option_name}'"),
                ))
            product.menus.append(menu)

        try:
            db.session.add(product)
            db.session.commit()
            current_app.logger.info(f"Product created: {product.id} {product.name}")
            return product
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error creating product: {e}")
            traceback.print_exc()
            raise

    @staticmethod
    def delete_product(product_id):
        product = db.session.get(Product, product_id)
        if not product:
            raise NotFoundError('Product not found.')
        try:
            db.session.delete(product)
            db.session.commit()
        except Exception:
            db.session.rollback()
            traceback.print_exc()
            raise
        finally:
            try:
                cache.delete(_product_cache_key(product_id))
            except Exception:
                pass
