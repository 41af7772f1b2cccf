"""
Web interface for r2dice.

Flask app exposing the dice engine as a JSON API.
- /api/roll: Evaluate an expression
- /api/normalize: Reorder suffixes without rolling
- /api/health: Liveness check
"""

import logging
from typing import Optional

from flask import Flask

from r2dice.core.config import Config, get_config
from r2dice.core.logging_config import setup_logging
from r2dice.dice.engine import DiceEngine
from r2dice.web.blueprints import api_bp

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> Flask:
    """
    Create Flask app serving the dice API.

    Args:
        config: Engine limits and server settings (global config when omitted)

    Returns:
        Flask app
    """
    config = config or get_config()

    app = Flask(__name__)
    app.config['R2_CONFIG'] = config
    app.json.sort_keys = False

    # One engine for the app lifetime; it keeps no per-request state
    app.dice_engine = DiceEngine(config)

    app.register_blueprint(api_bp)
    logger.info(f"Dice API ready ({config!r})")

    return app


def main():
    """Run development server."""
    import argparse

    config = get_config()

    parser = argparse.ArgumentParser(description='r2dice Web API')
    parser.add_argument('--host', default=config.host, help='Host to bind to')
    parser.add_argument('--port', type=int, default=config.port, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', default=config.debug, help='Enable debug mode')

    args = parser.parse_args()
    run_server(config, host=args.host, port=args.port, debug=args.debug)


def run_server(config: Config, host: str, port: int, debug: bool = False):
    """Set up logging, build the app and serve it until interrupted."""
    setup_logging(level=config.log_level, log_file=config.log_file)
    app = create_app(config)

    print(f"\n  r2dice Web API")
    print(f"")
    print(f"  Server URL:  http://{host}:{port}")
    print(f"  Try:         curl -X POST http://{host}:{port}/api/roll "
          f"-H 'Content-Type: application/json' -d '{{\"expression\": \"4d6k3\"}}'")
    print(f"")
    print(f"  Press Ctrl+C to stop")
    print(f"")

    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    main()
