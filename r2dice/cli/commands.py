#!/usr/bin/env python3
"""
Command-line interface for r2dice.

Provides commands for rolling and normalizing dice expressions and for
serving the JSON API from the terminal.
"""

import argparse
import json
import sys

from r2dice.core.config import get_config
from r2dice.core.logging_config import setup_logging
from r2dice.dice.engine import DiceEngine


def cmd_roll(args):
    """Evaluate a dice expression."""
    engine = DiceEngine(get_config())
    result = engine.roll(
        args.expression,
        seed=args.seed,
        normalize=False if args.no_normalize else None
    )

    if not result.success:
        print(f"✗ Error: {result.error}", file=sys.stderr)
        sys.exit(1)

    roll = result.data['result']
    if args.json:
        print(json.dumps({
            'expression': result.data['expression'],
            'normalized': result.data['normalized'],
            'result': roll.to_dict()
        }, indent=2))
        return

    print(f"✓ {result.data['expression']} = {roll.value}")
    if result.data['normalized'] != result.data['expression']:
        print(f"  Normalized: {result.data['normalized']}")
    for line in roll.describe().splitlines():
        print(f"  {line}")


def cmd_normalize(args):
    """Print an expression with its suffixes in grammar order."""
    engine = DiceEngine(get_config())
    print(engine.normalize(args.expression))


def cmd_serve(args):
    """Serve the JSON API."""
    from r2dice.web.server import run_server

    config = get_config()
    if args.log_level:
        config.log_level = args.log_level.upper()
    run_server(
        config,
        host=args.host or config.host,
        port=args.port or config.port,
        debug=args.debug or config.debug
    )


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='r2dice - R2 dice expression evaluator'
    )
    parser.add_argument('--log-level', help='Logging level (defaults to LOG_LEVEL or INFO)')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # ========== roll command ==========
    parser_roll = subparsers.add_parser('roll', help='Evaluate a dice expression')
    parser_roll.add_argument('expression', help="Dice expression, e.g. '4d6k3' or 's8+2t6'")
    parser_roll.add_argument('--seed', type=int, help='Random seed for a repeatable roll')
    parser_roll.add_argument('--json', action='store_true', help='Print the result as JSON')
    parser_roll.add_argument('--no-normalize', action='store_true',
                             help='Parse the expression exactly as typed')
    parser_roll.set_defaults(func=cmd_roll)

    # ========== normalize command ==========
    parser_normalize = subparsers.add_parser('normalize', help='Reorder roll suffixes')
    parser_normalize.add_argument('expression', help='Dice expression')
    parser_normalize.set_defaults(func=cmd_normalize)

    # ========== serve command ==========
    parser_serve = subparsers.add_parser('serve', help='Run the JSON API server')
    parser_serve.add_argument('--host', help='Host to bind to (defaults to HOST)')
    parser_serve.add_argument('--port', type=int, help='Port to bind to (defaults to PORT)')
    parser_serve.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser_serve.set_defaults(func=cmd_serve)

    # Parse and execute
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command != 'serve':
        config = get_config()
        try:
            setup_logging(level=args.log_level or config.log_level, log_file=config.log_file)
        except ValueError as e:
            print(f"✗ Error: {e}", file=sys.stderr)
            sys.exit(1)

    args.func(args)


if __name__ == '__main__':
    main()
