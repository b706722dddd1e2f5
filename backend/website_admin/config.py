import os
from dotenv import load_dotenv

load_dotenv()


def _csv(value, default):
    raw = os.getenv(value)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    # Slugs rendered by the landing site; anything else is reported as unlinked
    LANDING_SECTIONS = _csv(
        "LANDING_SECTIONS",
        [
            "hero",
            "about",
            "services",
            "practice-areas",
            "team",
            "achievements",
            "testimonials",
            "insights",
            "faq",
            "contact",
            "settings",
        ],
    )
    PREVIEW_PATH = os.getenv("PREVIEW_PATH", "/preview")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///website_admin.db")


class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "testing-secret-key-with-enough-length"
    JWT_SECRET_KEY = "testing-jwt-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite://"


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


class EditorConfig:
    """Settings for the editor session library (client side)."""

    API_BASE_URL = os.getenv("WEBSITE_API_BASE_URL", "http://localhost:5000")
    API_TIMEOUT = float(os.getenv("WEBSITE_API_TIMEOUT", "10"))
    AUTOSAVE_DELAY = float(os.getenv("AUTOSAVE_DELAY_SECONDS", "2.0"))
    REQUIRED_LOCALES = tuple(_csv("REQUIRED_LOCALES", []))
