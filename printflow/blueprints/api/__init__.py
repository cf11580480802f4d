from flask import Blueprint

api_bp = Blueprint('api', __name__)

from . import errors, timeline, orders, discounts, users, products, maintenance, tasks
