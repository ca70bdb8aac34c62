#region imports
from dataclasses import dataclass
from typing import Optional

import httpx
from loguru import logger

from AppSettings import settings

#endregion imports

REVIEWS_PATH = "/reviews"


class BookReviewApiError(Exception):
    """Transport failure, unexpected status or unparsable body from the API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BookReviewNotFound(BookReviewApiError):
    pass


class BookReviewValidationFailed(BookReviewApiError):
    def __init__(self, errors: dict[str, list[str]], status_code: int = 400):
        super().__init__("One or more validation errors occurred.", status_code)
        self.errors = errors


@dataclass
class ImageFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class BookReviewWrite:
    """Client side write shape; sent as multipart form fields plus an optional file part."""
    title: str
    author: str
    rating: int
    read_date: str
    review: str
    image: Optional[ImageFile] = None

    def form_data(self) -> dict[str, str]:
        return {
            "title": self.title,
            "author": self.author,
            "rating": str(self.rating),
            "readDate": self.read_date,
            "review": self.review,
        }

    def parts(self) -> list:
        """Every part of the multipart body.

        Scalars go out as filename-less parts so the body is multipart/form-data with or without an image.
        """
        parts = [(name, (None, value)) for name, value in self.form_data().items()]
        if self.image is not None:
            parts.append(("image", (self.image.filename, self.image.content, self.image.content_type)))
        return parts


class BookReviewClient:
    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: Optional[float] = None):
        options = {"base_url": base_url or settings.API_BASE_URL}
        if transport is not None:
            options["transport"] = transport
        timeout = timeout if timeout is not None else settings.API_TIMEOUT
        if timeout is not None:
            options["timeout"] = timeout
        self._client = httpx.AsyncClient(**options)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def list_reviews(self) -> list[dict]:
        response = await self._send("GET", REVIEWS_PATH)
        return self._json(response)

    async def get_review(self, review_id: int) -> dict:
        response = await self._send("GET", f"{REVIEWS_PATH}/{review_id}")
        return self._json(response)

    async def create_review(self, review: BookReviewWrite) -> dict:
        response = await self._send("POST", REVIEWS_PATH, files=review.parts())
        return self._json(response)

    async def update_review(self, review_id: int, review: BookReviewWrite):
        await self._send("PUT", f"{REVIEWS_PATH}/{review_id}", files=review.parts())

    async def delete_review(self, review_id: int):
        await self._send("DELETE", f"{REVIEWS_PATH}/{review_id}")

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error("Connection error calling {method} {url}: {error}", method=method, url=url, error=e)
            raise BookReviewApiError(f"connection error to Book Reviews API: {e}") from e

        if response.status_code == 404:
            raise BookReviewNotFound(f"{method} {url} returned 404", status_code=404)
        if response.status_code in (400, 413):
            body = self._json(response)
            errors = body.get("errors", {}) if isinstance(body, dict) else {}
            raise BookReviewValidationFailed(errors, status_code=response.status_code)
        if response.status_code >= 400:
            logger.error(
                "Book Reviews API error {status_code} for {method} {url}: {body}",
                status_code=response.status_code,
                method=method,
                url=url,
                body=response.text,
            )
            raise BookReviewApiError(
                f"Book Reviews API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise BookReviewApiError(
                f"Book Reviews API returned invalid JSON for {response.request.method} {response.request.url}",
                status_code=response.status_code,
            ) from e
