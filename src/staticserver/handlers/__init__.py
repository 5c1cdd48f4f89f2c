"""
Request handlers.

    from staticserver.handlers import StaticFileHandler

    static = StaticFileHandler(root_dir="./public")
    response = static.handle(request)
"""

from .static import StaticFileHandler, serve_static, NOT_FOUND_PAGE

__all__ = [
    "StaticFileHandler",
    "serve_static",
    "NOT_FOUND_PAGE",
]
