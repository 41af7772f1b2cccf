"""
JSON Schemas for roll requests and serialized roll results.

ROLL_REQUEST_SCHEMA describes the body of POST /api/roll.
ROLL_RESULT_SCHEMA describes RollResult.to_dict() output; nested results
(multiple rolls, arithmetic operands, bounded inner results, sequences)
refer back to the root schema.
"""

from typing import Any, Dict

import jsonschema

RESULT_KINDS = [
    "generic",
    "savage_wild",
    "success_fail",
    "multiple",
    "simple",
    "bounded",
    "weg_d6",
    "ironsworn",
    "flag",
    "sequence",
]

ROLL_REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "expression": {"type": "string", "minLength": 1, "maxLength": 1000},
        "seed": {"type": "integer"},
        "normalize": {"type": "boolean"}
    },
    "required": ["expression"],
    "additionalProperties": False
}

ROLL_RESULT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$defs": {
        "die": {
            "type": "object",
            "properties": {
                "value": {"type": "integer"},
                "exploded": {"type": "boolean"},
                "total": {"type": "integer"},
                "rolls": {"type": "array", "items": {"type": "integer"}, "minItems": 1},
                "chain": {"anyOf": [{"$ref": "#/$defs/die"}, {"type": "null"}]}
            },
            "required": ["value", "exploded", "total", "rolls", "chain"]
        },
        "dice": {
            "type": "array",
            "items": {"anyOf": [{"$ref": "#/$defs/die"}, {"type": "integer"}]}
        },
        "raises": {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "raises": {"type": "integer", "minimum": 0},
                "margin": {"type": "integer"}
            },
            "required": ["success", "raises", "margin"]
        },
        "results": {"type": "array", "items": {"$ref": "#"}}
    },
    "type": "object",
    "properties": {
        "kind": {"enum": RESULT_KINDS},
        "value": {"type": "integer"},
        "description": {"type": "string"},
        "dice": {"$ref": "#/$defs/dice"},
        "kept_dice": {"$ref": "#/$defs/dice"},
        "dropped_dice": {"$ref": "#/$defs/dice"},
        "trait_die": {"$ref": "#/$defs/die"},
        "wild_die": {"$ref": "#/$defs/die"},
        "used_die": {"enum": ["trait", "wild"]},
        "keep_operation": {"enum": ["none", "highest", "lowest", "advantage", "disadvantage"]},
        "raises": {"anyOf": [{"$ref": "#/$defs/raises"}, {"type": "null"}]},
        "modifier": {"type": "integer"},
        "modifier_sources": {"$ref": "#/$defs/results"},
        "rolls": {"$ref": "#/$defs/results"},
        "results": {"$ref": "#/$defs/results"},
        "operands": {"$ref": "#/$defs/results"},
        "inner": {"$ref": "#"},
        "challenge_dice": {
            "type": "array",
            "items": {"type": "integer"},
            "minItems": 2,
            "maxItems": 2
        },
        "outcome": {"enum": ["strong_hit", "weak_hit", "miss"]}
    },
    "required": ["kind", "value", "description"]
}


def validate_roll_request(data: Dict[str, Any]) -> None:
    """
    Validate a roll request body.

    Raises:
        jsonschema.ValidationError: If the body doesn't match ROLL_REQUEST_SCHEMA
    """
    jsonschema.validate(data, ROLL_REQUEST_SCHEMA)


def validate_roll_payload(data: Dict[str, Any]) -> bool:
    """
    Validate a serialized roll result.

    Args:
        data: Output of RollResult.to_dict()

    Returns:
        True if valid

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, ROLL_RESULT_SCHEMA)
    return True


__all__ = [
    'RESULT_KINDS',
    'ROLL_REQUEST_SCHEMA',
    'ROLL_RESULT_SCHEMA',
    'validate_roll_request',
    'validate_roll_payload',
]
