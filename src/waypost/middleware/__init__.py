"""Middleware chain execution and the built-in middlewares."""

from .body_parser import BodyParserOptions, body_parser, parse_body
from .chain import Middleware, Next, run_chain
from .not_found import default_not_found_handler

__all__ = [
    "BodyParserOptions",
    "body_parser",
    "parse_body",
    "Middleware",
    "Next",
    "run_chain",
    "default_not_found_handler",
]
