from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)

    from .logging_config import configure_logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .middleware import register_access_gate
    register_access_gate(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.financial import financial_bp
    from .routes.inventory import inventory_bp
    from .routes.pos import pos_bp
    from .routes.suppliers import suppliers_bp
    from .routes.members import members_bp
    from .routes.activity import activity_bp
    from .routes.reports import dashboard_bp, reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(financial_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(pos_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(activity_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(dashboard_bp)

    allowed_origins = set(app.config.get("CORS_ORIGINS", ()))

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
