"""
Faleproxy - Proxy Server
Flask application factory for the proxy and viewer; started by `faleproxy serve`.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask

from faleproxy.controllers.proxy_controller import ProxyController
from faleproxy.core.managers.config_manager import config_manager
from faleproxy.core.utils.path_utils import PathUtils
from faleproxy.server.routers.page_router import page_router
from faleproxy.server.routers.proxy_api_router import proxy_api_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[Dict[str, Any]] = None, controller: Optional[ProxyController] = None) -> Flask:
    """
    Application factory. The controller is injected into the app config so the
    blueprints can reach it.
    """
    config = config if config is not None else config_manager.get_all()
    flask_app = Flask(__name__, template_folder=str(PathUtils.get_templates_dir()))

    proxy_controller = controller or ProxyController(config)

    flask_app.config['PROXY_CONTROLLER'] = proxy_controller
    flask_app.config['SUBSTITUTE_WORD'] = proxy_controller.substitute_word

    flask_app.register_blueprint(proxy_api_router)
    flask_app.register_blueprint(page_router)

    return flask_app


def serve(debug: bool = False) -> None:
    """Starts the Flask development server on server.host / server.port."""
    host = config_manager.get_nested("server.host", "0.0.0.0")
    port = int(config_manager.get_nested("server.port", 3001))

    app = create_app()

    print("\n" + "=" * 50)
    print(f"🚀  FALEPROXY | {app.config['PROXY_CONTROLLER'].target_word} -> {app.config['SUBSTITUTE_WORD']}")
    print("=" * 50)
    print(f"📡  Listening on:        http://{host}:{port}")
    print(f"🌍  Host Browser Access: http://localhost:{port}")
    print("-" * 50 + "\n")

    # use_reloader=False prevents double-initialization of the controller
    app.run(debug=debug, host=host, port=port, use_reloader=False)

