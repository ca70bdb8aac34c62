#region imports
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ClientApp.BookForm import BookForm
from ClientApp.BookReviewClient import (
    BookReviewApiError,
    BookReviewClient,
    BookReviewNotFound,
    BookReviewWrite,
)
from Helper.ImageHelper import ImageHelper

#endregion imports

PLACEHOLDER_IMAGE = "/default-book-placeholder.png"
TOTAL_STARS = 5
FILLED_STAR = "★"
EMPTY_STAR = "☆"

LIST_PATH = "/display-books"
NOT_FOUND_PATH = "/not-found"

LOADING_BOOKS = "Loading books..."
NO_BOOKS = "No books available"
LIST_LOAD_ERROR = "There was an error loading the books. Please try again later."
DELETE_CONFIRMATION = "Are you sure you want to delete this review?"
DELETE_ERROR = "Failed to delete book"
DETAIL_LOAD_ERROR = "There was an error loading the book details. Please try again later."
EDIT_LOAD_ERROR = "Failed to load book data. Please try again later."
ADD_SUCCESS = "Book review added successfully!"
ADD_FAILED = "Failed to add book review. Please try again."
UPDATE_SUCCESS = "Book review updated successfully!"
UPDATE_FAILED = "Failed to update book review. Please try again."
UNEXPECTED_ERROR = "An error occurred. Please try again later."


def image_source(book: dict) -> str:
    return ImageHelper.to_data_url(book.get("imageBase64"), book.get("imageMimeType")) or PLACEHOLDER_IMAGE


def render_stars(rating: int) -> list[str]:
    return [FILLED_STAR if i <= rating else EMPTY_STAR for i in range(1, TOTAL_STARS + 1)]


def detail_path(review_id: int) -> str:
    return f"/books/{review_id}"


def edit_path(review_id: int) -> str:
    return f"/edit-book/{review_id}"


@dataclass
class BookCard:
    id: int
    title: str
    author: str
    image_src: str

    @property
    def detail_path(self) -> str:
        return detail_path(self.id)

    @property
    def edit_path(self) -> str:
        return edit_path(self.id)


class BookListView:
    """All reviews as summary cards, with a confirmation step before deleting one."""

    def __init__(self, client: BookReviewClient):
        self.client = client
        self.books: list[dict] = []
        self.error = ""
        self.loading = True
        self.pending_delete: Optional[int] = None
        self.alert = ""

    async def load(self):
        self.loading = True
        try:
            self.books = await self.client.list_reviews()
            self.error = ""
        except BookReviewApiError as e:
            logger.error("Error fetching books: {error}", error=e)
            self.error = LIST_LOAD_ERROR
        finally:
            self.loading = False

    @property
    def status_message(self) -> str:
        if self.loading:
            return LOADING_BOOKS
        if self.error:
            return self.error
        if not self.books:
            return NO_BOOKS
        return ""

    @property
    def cards(self) -> list[BookCard]:
        return [BookCard(book["id"], book["title"], book["author"], image_source(book)) for book in self.books]

    @property
    def confirmation_message(self) -> Optional[str]:
        return DELETE_CONFIRMATION if self.pending_delete is not None else None

    def request_delete(self, review_id: int):
        self.pending_delete = review_id

    def cancel_delete(self):
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        if self.pending_delete is None:
            return False
        review_id = self.pending_delete
        try:
            await self.client.delete_review(review_id)
        except BookReviewApiError as e:
            logger.error("Error deleting book id={id}: {error}", id=review_id, error=e)
            self.alert = DELETE_ERROR
            return False
        finally:
            self.pending_delete = None
        self.books = [book for book in self.books if book["id"] != review_id]
        logger.info("Book id={id} deleted", id=review_id)
        return True


class BookDetailView:
    def __init__(self, client: BookReviewClient):
        self.client = client
        self.book: Optional[dict] = None
        self.loading = True
        self.error: Optional[str] = None
        self.not_found = False
        self.redirect_to: Optional[str] = None

    async def load(self, review_id: int):
        self.loading = True
        self.error = None
        try:
            data = await self.client.get_review(review_id)
            self.book = {
                "id": data["id"],
                "title": data["title"],
                "author": data["author"],
                "rating": data["rating"],
                "readDate": data["readDate"],
                "review": data["review"],
                "image": image_source(data),
            }
        except BookReviewNotFound:
            self.not_found = True
            self.redirect_to = NOT_FOUND_PATH
        except BookReviewApiError as e:
            logger.error("Error fetching book details id={id}: {error}", id=review_id, error=e)
            self.error = DETAIL_LOAD_ERROR
        finally:
            self.loading = False

    @property
    def stars(self) -> list[str]:
        if self.book is None:
            return []
        return render_stars(self.book["rating"])

    @property
    def edit_path(self) -> Optional[str]:
        if self.book is None:
            return None
        return edit_path(self.book["id"])


class AddBookPage:
    def __init__(self, client: BookReviewClient):
        self.client = client
        self.status_message = ""
        self.form = BookForm(self.handle_add_book, is_edit=False, button_text="Add Book")

    async def handle_add_book(self, review: BookReviewWrite) -> bool:
        try:
            await self.client.create_review(review)
        except BookReviewApiError as e:
            logger.error("Add book error: {error}", error=e)
            self.status_message = ADD_FAILED if e.status_code else UNEXPECTED_ERROR
            return False
        self.status_message = ADD_SUCCESS
        return True


class EditBookPage:
    def __init__(self, client: BookReviewClient, review_id: int):
        self.client = client
        self.review_id = review_id
        self.book_data: Optional[dict] = None
        self.loading = True
        self.error: Optional[str] = None
        self.status_message = ""
        self.redirect_to: Optional[str] = None
        self.form = BookForm(self.handle_edit_book, is_edit=True, button_text="Update Book Review")

    async def load(self):
        try:
            self.book_data = await self.client.get_review(self.review_id)
            self.form.populate(self.book_data)
        except BookReviewApiError as e:
            logger.error("Error loading book id={id} for edit: {error}", id=self.review_id, error=e)
            self.error = EDIT_LOAD_ERROR
        finally:
            self.loading = False

    async def handle_edit_book(self, review: BookReviewWrite) -> bool:
        try:
            await self.client.update_review(self.review_id, review)
        except BookReviewApiError as e:
            logger.error("Edit book error id={id}: {error}", id=self.review_id, error=e)
            self.status_message = UPDATE_FAILED if e.status_code else UNEXPECTED_ERROR
            return False
        self.status_message = UPDATE_SUCCESS
        self.redirect_to = LIST_PATH
        return True
