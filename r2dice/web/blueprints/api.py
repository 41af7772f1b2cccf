"""
Dice API Blueprint.

Provides REST API endpoints for evaluating R2 dice expressions.

Endpoints:
- POST /api/roll - Evaluate an expression
- GET /api/normalize?expression=... - Reorder suffixes without rolling
- GET /api/health - Liveness check
"""

import logging

import jsonschema
from flask import Blueprint, current_app, jsonify, request

from r2dice import __version__
from r2dice.core.result import ErrorCode
from r2dice.dice.engine import DiceEngine
from r2dice.dice.schemas import validate_roll_request

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


def get_engine() -> DiceEngine:
    """Get the DiceEngine created with the app."""
    return current_app.dice_engine


def error_response(error: str, code, status: int = 400, **extra):
    body = {
        'success': False,
        'error': error,
        'error_code': code.value if isinstance(code, ErrorCode) else code
    }
    body.update(extra)
    return jsonify(body), status


@api_bp.route('/roll', methods=['POST'])
def api_roll():
    """
    Evaluate a dice expression.

    Request body:
        {"expression": "4d6k3", "seed": 42, "normalize": true}

    Returns:
        {
            "success": true,
            "expression": "4d6k3",
            "normalized": "4d6k3",
            "result": {"kind": "generic", "value": 13, ...}
        }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be a JSON object', ErrorCode.INVALID_INPUT)

    try:
        validate_roll_request(data)
    except jsonschema.ValidationError as e:
        return error_response(f'Invalid request: {e.message}', ErrorCode.INVALID_INPUT)

    try:
        result = get_engine().roll(
            data['expression'],
            seed=data.get('seed'),
            normalize=data.get('normalize')
        )
    except Exception as e:
        logger.error(f"Error evaluating {data['expression']!r}: {e}", exc_info=True)
        return error_response(str(e), ErrorCode.UNEXPECTED_ERROR, status=500)

    if not result.success:
        return error_response(result.error, result.error_code, **(result.details or {}))

    return jsonify({
        'success': True,
        'expression': result.data['expression'],
        'normalized': result.data['normalized'],
        'result': result.data['result'].to_dict()
    })


@api_bp.route('/normalize')
def api_normalize():
    """
    Normalize the suffix order of an expression.

    Returns:
        {"success": true, "expression": "s8+2t4", "normalized": "s8t4+2"}
    """
    expression = request.args.get('expression')
    if not expression:
        return error_response('Missing expression parameter', ErrorCode.INVALID_INPUT)

    return jsonify({
        'success': True,
        'expression': expression,
        'normalized': get_engine().normalize(expression)
    })


@api_bp.route('/health')
def api_health():
    """Liveness check."""
    return jsonify({'success': True, 'status': 'ok', 'version': __version__})
