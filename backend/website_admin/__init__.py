from flask import Flask, send_file, current_app
from .config import config_by_name
from .extensions import db, migrate, jwt
from . import models  # noqa: F401
from .api.v1 import api_bp, site_bp
from .errors import register_error_handlers
from .commands import register_commands
from flask_swagger_ui import get_swaggerui_blueprint
import os


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # -------------------------------------------------
    # Blueprints
    # -------------------------------------------------
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(site_bp)
    register_error_handlers(app)
    register_commands(app)

    # -------------------------------------------------
    # Serve OpenAPI YAML (public)
    # -------------------------------------------------
    @app.route("/openapi/website.yaml", methods=["GET"], endpoint="openapi_website")
    def serve_openapi():
        spec_path = os.path.join(
            current_app.root_path,
            "api",
            "v1",
            "website_openapi.yaml",
        )

        if not os.path.exists(spec_path):
            raise FileNotFoundError("website_openapi.yaml not found")

        return send_file(
            spec_path,
            mimetype="application/yaml",
            as_attachment=False,
        )

    # -------------------------------------------------
    # Swagger UI
    # -------------------------------------------------
    SWAGGER_URL = "/swagger"
    API_URL = "/openapi/website.yaml"

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            "app_name": "Website Content API",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )

    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)

    return app
