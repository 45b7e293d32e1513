from flask import Blueprint

api_bp = Blueprint("api", __name__)

# Import route modules to register their endpoints
from . import jobs           # noqa: E402,F401
from . import tasks          # noqa: E402,F401
from . import departments    # noqa: E402,F401
from . import employees      # noqa: E402,F401
from . import roles          # noqa: E402,F401
from . import clients        # noqa: E402,F401
from . import reports        # noqa: E402,F401
from . import files          # noqa: E402,F401
