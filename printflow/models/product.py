from datetime import datetime
from sqlalchemy import Index

from printflow.extensions import db

class Product(db.Model):
    __tablename__ = 'products'
    __table_args__ = (
        Index('ix_product_type_name', 'type', 'name'),
    )
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(50), nullable=False, index=True)
    image_url = db.Column(db.String(1024), nullable=True)
    base_price = db.Column(db.Numeric(10, 2), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=datetime.utcnow)

    menus = db.relationship('ProductMenu', back_populates='product', cascade="all, delete-orphan",
                            order_by='ProductMenu.id')

    def to_dict(self, with_menus=True):
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'image_url': self.image_url,
            'base_price': float(self.base_price) if self.base_price is not None else None,
        }
        if with_menus:
            data['product_menus'] = [m.to_dict() for m in self.menus]
        return data

class ProductMenu(db.Model):
    """A named choice on a product (e.g. Size, Material); the customer picks one option."""
    __tablename__ = 'product_menus'
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)

    product = db.relationship('Product', back_populates='menus')
    options = db.relationship('ProductMenuOption', back_populates='menu', cascade="all, delete-orphan",
                              order_by='ProductMenuOption.id')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'product_menu_options': [o.to_dict() for o in self.options],
        }

class ProductMenuOption(db.Model):
    __tablename__ = 'product_menu_options'
    id = db.Column(db.Integer, primary_key=True)
    menu_id = db.Column(db.Integer, db.ForeignKey('product_menus.id', ondelete='CASCADE'), nullable=False, index=True)
    option_name = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    menu = db.relationship('ProductMenu', back_populates='options')

    def to_dict(self):
        return {
            'id': self.id,
            'option_name': self.option_name,
            'price': float(self.price or 0),
        }
