"""Small async HTTP toolkit: routing, middleware chains and range-aware downloads."""

from .app import Server
from .config import ServerConfig
from .download import Download
from .errors import HttpParseError, MultipartDecodeError, RangeNotSatisfiable, WaypostError
from .filesystem import Directory, File
from .http import HttpServer, Request, Response
from .middleware import BodyParserOptions, body_parser, default_not_found_handler, run_chain
from .routing import Dispatcher, MountPrecedence, Router

__all__ = [
    # Serving
    "Server",
    "ServerConfig",
    "HttpServer",
    "Request",
    "Response",
    # Routing
    "Router",
    "Dispatcher",
    "MountPrecedence",
    # Middleware
    "run_chain",
    "body_parser",
    "BodyParserOptions",
    "default_not_found_handler",
    # Files
    "Directory",
    "File",
    "Download",
    # Errors
    "WaypostError",
    "HttpParseError",
    "RangeNotSatisfiable",
    "MultipartDecodeError",
]
