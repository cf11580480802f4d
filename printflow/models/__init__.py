from printflow.extensions import db

from .auth import User
from .product import Product, ProductMenu, ProductMenuOption
from .discount import DiscountCode
from .order import Order, OrderItem, OrderItemOption
