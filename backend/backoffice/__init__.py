# backend/backoffice/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.vendors import vendors_bp
    from .routes.customers import customers_bp
    from .routes.gate_in import gate_in_bp
    from .routes.gate_out import gate_out_bp
    from .routes.invoices import invoices_bp
    from .routes.hrm import hrm_bp
    from .routes.expenses import expenses_bp
    from .routes.catalog import raw_products_bp, products_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(gate_in_bp)
    app.register_blueprint(gate_out_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(hrm_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(raw_products_bp)
    app.register_blueprint(products_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
