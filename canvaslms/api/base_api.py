from typing import Any, TypeVar

from pydantic import BaseModel

from canvaslms.client import Client
from canvaslms.utils.pagination import Paginator, model_decoder
from canvaslms.utils.settings import get_settings
from canvaslms.utils.streams import ErrorPolicy, TypedStream, fail_fast

M = TypeVar('M', bound=BaseModel)


class BaseApi:

    def __init__(self, client: Client, on_error: ErrorPolicy = fail_fast) -> None:
        self._client = client
        self.on_error = on_error

    def _paginate(self, path: str, model: type[M], query: Any = None) -> Paginator[M]:
        """Build a paginator for a collection of `model` using the configured page settings."""
        settings = get_settings()
        return Paginator(
            self._client,
            path,
            model_decoder(model),
            query=query,
            per_page=settings.per_page,
            max_concurrency=settings.max_concurrency,
            page_timeout=settings.page_timeout,
        )

    def _stream(self, path: str, model: type[M], query: Any = None,
                on_error: ErrorPolicy | None = None) -> TypedStream[M]:
        return TypedStream(self._paginate(path, model, query), on_error=on_error or self.on_error)
