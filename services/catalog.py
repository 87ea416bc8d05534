from core.errors import NotFound
from core.extensions import db
from models.productModels import Products


def lookup_product(product_id):
    """Current price and owning seller for a listing, or NotFound."""
    product = db.session.get(Products, str(product_id))
    if not product:
        raise NotFound("Product not found")
    return product


def list_active_products():
    return Products.query.filter_by(status="active").order_by(Products.created_at.desc(), Products.id).all()
