"""
Flask application factory and development server entry-point.
"""

import os
from functools import partial
from typing import Optional

from flask import Flask

from hmis_access.config import SECRET_KEY
from hmis_access.database import init_engine, load_identity
from hmis_access.web.auth import IdentityLoader, init_access
from hmis_access.web.routes import register_routes


def create_app(identity_loader: Optional[IdentityLoader] = None):
    """Build and return a configured Flask application.

    Without an explicit *identity_loader* users are read from the database
    named by ``DB_URI``.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = SECRET_KEY

    if identity_loader is None:
        print("[init] Initializing database connection...")
        engine = init_engine()
        identity_loader = partial(load_identity, engine)

    init_access(app, identity_loader)
    register_routes(app)

    return app


def main():
    """Run the development server."""
    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"[server] Starting Flask on {host}:{port} (debug={debug})")
    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
