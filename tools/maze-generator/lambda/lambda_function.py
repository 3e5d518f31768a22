"""Maze generator Lambda entrypoint.

Deployed with handler setting "lambda_function.lambda_handler"; the request
pipeline lives in handler.py.
"""

from handler import lambda_handler

__all__ = ["lambda_handler"]
