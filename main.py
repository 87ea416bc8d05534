from werkzeug.exceptions import HTTPException

from core.imports import jsonify, Flask
from core.config import Config
from core.errors import MarketplaceError
from core.extensions import db, jwt, swagger, cors, bcrypt, migrate
from routes.auth import auth_bp, seed_demo_users
from routes.marketplace import marketplace_bp, seed_demo_listings
from routes.buyerOrders import buyer_orders
from routes.sellerOrders import seller_orders
from routes.payments import payments_bp
from services.paymentGateway import GatewayConfig, RazorpayGateway


def create_app(config_object=Config, payment_gateway=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    jwt.init_app(app)
    swagger.init_app(app)
    cors.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)

    if payment_gateway is None:
        payment_gateway = RazorpayGateway(GatewayConfig.from_app_config(app.config))
    app.extensions["payment_gateway"] = payment_gateway
    if payment_gateway.config.test_mode:
        app.logger.warning("Payment gateway running in TEST MODE; large amounts are clamped")

    app.register_blueprint(auth_bp)
    app.register_blueprint(marketplace_bp)
    app.register_blueprint(buyer_orders)
    app.register_blueprint(seller_orders)
    app.register_blueprint(payments_bp)

    register_error_handlers(app)

    @app.route('/ping')
    def ping():
        return "Ping received", 200

    return app


def register_error_handlers(app):
    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return jsonify({"success": False, "error": "internal_error", "message": "Something went wrong"}), 500


app = create_app()


if __name__ == "__main__":
    with app.app_context():
        db.create_all()

        seed_demo_users()
        seed_demo_listings()

    app.run(debug=True)
