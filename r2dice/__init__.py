"""
r2dice - R2 dice expression evaluator for tabletop RPGs.

    from r2dice import evaluate, normalize

    evaluate("4d6k3").value
    normalize("s8+2t4")   # "s8t4+2"
"""

from .dice import DiceEngine, EvaluationError, evaluate, normalize

__version__ = "0.1.0"

__all__ = ['DiceEngine', 'EvaluationError', 'evaluate', 'normalize', '__version__']
