"""Canvas LMS API Client.

An async Python client for the Canvas LMS REST API. Collection endpoints are
paged through concurrently: the first page reveals the page count and the
remaining pages are fetched in parallel.

Example usage:
    from canvaslms import Canvas, log_and_continue

    async with Canvas() as canvas:
        canvas.set_error_handler(log_and_continue)
        async for file in canvas.course_files(1234):
            print(f"File: {file.name}")

        folders = await canvas.course_api.list_folders(1234)
"""

from canvaslms.canvas import Canvas
from canvaslms.client import Client
from canvaslms.exceptions import (
    CanvasError,
    ConfigurationError,
    ValidationError,
    TransportError,
    NetworkError,
    APIError,
    ParseError,
    PageCountUnavailableError,
    DecodeError,
)

# Models
from canvaslms.models.course import Course
from canvaslms.models.file import File
from canvaslms.models.folder import Folder

# Pagination
from canvaslms.utils.links import PageLink, parse_link_header
from canvaslms.utils.pagination import PageRequest, Paginator, ResultStream, collect, model_decoder
from canvaslms.utils.streams import (
    StreamState,
    TypedStream,
    fail_fast,
    log_and_continue,
    stop_on_error,
)

__version__ = "0.1.0"

__all__ = [
    # Main entry point
    "Canvas",
    "Client",
    # Exceptions
    "CanvasError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "NetworkError",
    "APIError",
    "ParseError",
    "PageCountUnavailableError",
    "DecodeError",
    # Models
    "Course",
    "File",
    "Folder",
    # Pagination
    "PageLink",
    "parse_link_header",
    "PageRequest",
    "Paginator",
    "ResultStream",
    "collect",
    "model_decoder",
    "StreamState",
    "TypedStream",
    "fail_fast",
    "log_and_continue",
    "stop_on_error",
]
