from core.imports import Blueprint, jsonify, current_app
from core.extensions import db
from models.productModels import Products
from models.userModel import Users
from services.catalog import list_active_products, lookup_product

marketplace_bp = Blueprint('marketplace', __name__)


def seed_demo_listings():
    seller = Users.query.filter_by(email="demo@seller.com").first()
    if not seller:
        current_app.logger.warning("No demo seller found. Run seed_demo_users() first.")
        return

    sample_listings = [
        {
            "make": "Maruti Suzuki",
            "model": "Swift",
            "year": 2019,
            "trim": "VXI",
            "mileage": 42000,
            "price": 500000,
            "transmission": "manual",
            "fuel_type": "petrol",
            "location": "Bengaluru",
        },
        {
            "make": "Hyundai",
            "model": "Creta",
            "year": 2021,
            "trim": "SX",
            "mileage": 18000,
            "price": 1350000,
            "transmission": "automatic",
            "fuel_type": "diesel",
            "location": "Pune",
        },
    ]

    for listing in sample_listings:
        exists = Products.query.filter_by(make=listing["make"], model=listing["model"], listed_by=seller.id).first()
        if exists:
            continue
        db.session.add(Products(
            contact_number=seller.phone or "0000000000",
            description=f"Single owner {listing['make']} {listing['model']}.",
            listed_by=seller.id,
            **listing
        ))
        current_app.logger.info("Demo listing added: %s %s", listing["make"], listing["model"])
    db.session.commit()


@marketplace_bp.route('/api/products', methods=['GET'])
def list_products():
    """
    Get all active car listings, newest first
    ---
    tags:
      - Marketplace
    responses:
      200:
        description: List of active listings
        schema:
          type: object
          properties:
            products:
              type: array
              items:
                type: object
            count:
              type: integer
              example: 2
    """
    products = list_active_products()
    return jsonify({
        "products": [product.to_dict() for product in products],
        "count": len(products)
    }), 200


@marketplace_bp.route('/api/products/<string:product_id>', methods=['GET'])
def product_details(product_id):
    """
    Get details of a specific listing
    ---
    tags:
      - Marketplace
    parameters:
      - name: product_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Listing details with the seller's public contact
      404:
        description: Product not found
    """
    product = lookup_product(product_id)
    data = product.to_dict()
    data["seller"] = product.seller.to_public_dict() if product.seller else None
    return jsonify(data), 200
