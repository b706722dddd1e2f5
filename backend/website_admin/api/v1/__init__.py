from flask import Blueprint

# JSON API, mounted under /api
api_bp = Blueprint("api", __name__)

# Browser-facing routes (preview links, uploaded media)
site_bp = Blueprint("site", __name__)

# Import route modules so they register with the blueprints
from . import auth
from . import pages
from . import activity
from . import media
from . import public
