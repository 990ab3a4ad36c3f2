import sys

from loguru import logger

from canvaslms.api.course_api import CourseApi
from canvaslms.api.folder_api import FolderApi
from canvaslms.client import Client
from canvaslms.models.file import File
from canvaslms.models.folder import Folder
from canvaslms.utils.settings import get_settings
from canvaslms.utils.streams import ErrorPolicy, TypedStream


class Canvas:
    """
    Main entry point for the Canvas REST API.

    Wires up the HTTP client, logging and the API objects. Collections are
    fetched page-concurrently and exposed either as lists or as typed async
    streams.
    """

    def __init__(self, base_url: str | None = None, token: str | None = None) -> None:
        """
        :param base_url: API root, defaults to CANVAS_BASE_URL
        :param token: Access token, defaults to CANVAS_TOKEN
        :raises ConfigurationError: If no Canvas instance is configured
        """
        self._init_logger()
        self._client = Client(base_url=base_url, token=token)

        self.course_api = CourseApi(self._client)
        self.folder_api = FolderApi(self._client)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()

    async def __aenter__(self) -> "Canvas":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def set_error_handler(self, policy: ErrorPolicy) -> None:
        """
        Set the error policy used by every stream created from now on.

        The policy is called with each page error and a ``cancel`` callable.
        Calling ``cancel`` ends the stream. The default policy raises the error.

        :param policy: The error handling callback
        """
        self.course_api.on_error = policy
        self.folder_api.on_error = policy

    def course_files(self, course_id: int) -> TypedStream[File]:
        """Stream every file in a course."""
        return self.course_api.files(course_id)

    def course_folders(self, course_id: int) -> TypedStream[Folder]:
        """Stream every folder in a course."""
        return self.course_api.folders(course_id)

    def _init_logger(self) -> None:
        """Configure logging based on CANVAS_DEBUG environment variable.

        If CANVAS_DEBUG is set to a truthy value, enables DEBUG level logging.
        Otherwise, only WARNING and above are shown.
        """
        logger.remove()
        settings = get_settings()
        level = "DEBUG" if settings.debug else "WARNING"
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ) if settings.debug else "<level>{message}</level>"
        logger.add(sys.stderr, level=level, format=log_format)
