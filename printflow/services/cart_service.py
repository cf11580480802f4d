import traceback
from flask import current_app

from printflow.extensions import db
from printflow.models import Order, OrderItem, OrderItemOption
from printflow.constants import OrderStatus
from printflow.errors import NotFoundError, ValidationError, PrintflowError
from .discount_service import DiscountService
from .product_service import ProductService
from .pricing import calculate_total


class CartService:

    @staticmethod
    def quote(product_id, selected_option_ids, quantity, code=None, now=None):
        """Price a configured product; validates the selection and the optional discount."""
        product = ProductService.load_product(product_id)
        if not product:
            raise NotFoundError('Product not found.')

        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise ValidationError('Quantity must be a whole number.')
        if quantity < 1:
            raise ValidationError('Quantity must be at least 1.')

        try:
            selected = [int(i) for i in (selected_option_ids or [])]
        except (TypeError, ValueError):
            raise ValidationError('Option ids must be integers.')

        options_by_id = {}
        for menu in product.menus:
            for opt in menu.options:
                options_by_id[opt.id] = opt

        chosen = {}
        for option_id in selected:
            opt = options_by_id.get(option_id)
            if opt is None:
                raise ValidationError(f'Option {option_id} does not belong to this product.')
            if opt.menu_id in chosen:
                raise ValidationError(f"Only one option can be chosen for '{opt.menu.name}'.")
            chosen[opt.menu_id] = opt

        missing = [m.name for m in product.menus if m.id not in chosen]
        if missing:
            raise ValidationError(f"Please select an option for: {', '.join(missing)}")

        discount_code = None
        if code:
            discount_code = DiscountService.validate(code, now)

        options = [chosen[m.id] for m in product.menus]
        prices = calculate_total(
            [o.price for o in options],
            quantity,
            discount_code.type if discount_code else None,
            discount_code.amount if discount_code else None,
        )
        return {
            'product': product,
            'options': options,
            'quantity': quantity,
            'discount_code': discount_code,
            **prices,
        }

    @staticmethod
    def add_to_cart(product_id, selected_option_ids, quantity, code=None, user_id=None):
        """Create the order, its item, the chosen options and the discount use as one unit."""
        quote = CartService.quote(product_id, selected_option_ids, quantity, code)
        product = quote['product']
        discount_code = quote['discount_code']

        try:
            order = Order(
                user_id=user_id,
                status=OrderStatus.PENDING,
                quantity=quote['quantity'],
                price=quote['total'],
                type=product.type,
                discount_code_id=discount_code.id if discount_code else None,
            )
            item = OrderItem(product_id=product.id)
            for opt in quote['options']:
                item.options.append(OrderItemOption(product_menu_option_id=opt.id))
            order.items.append(item)
            db.session.add(order)

            if discount_code:
                DiscountService.redeem(discount_code.id)

            db.session.commit()
            current_app.logger.info(f"Cart order {order.id} created for product {product.id} total={quote['total']}")
            return order, quote
        except PrintflowError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"add_to_cart error: {e}")
            traceback.print_exc()
            raise
