import base64
from datetime import date

import httpx
import pytest

from ClientApp.BookForm import BookForm
from ClientApp.BookReviewClient import (
    BookReviewApiError,
    BookReviewClient,
    BookReviewNotFound,
    BookReviewValidationFailed,
    BookReviewWrite,
    ImageFile,
)
from ClientApp.BookViews import (
    ADD_FAILED,
    ADD_SUCCESS,
    DELETE_CONFIRMATION,
    DELETE_ERROR,
    DETAIL_LOAD_ERROR,
    EDIT_LOAD_ERROR,
    LIST_LOAD_ERROR,
    NO_BOOKS,
    PLACEHOLDER_IMAGE,
    UNEXPECTED_ERROR,
    UPDATE_SUCCESS,
    AddBookPage,
    BookDetailView,
    BookListView,
    EditBookPage,
    render_stars,
)
from Helper.ValidationHelper import AUTHOR_LETTERS_ONLY, IMAGE_TOO_LARGE, READ_DATE_IN_FUTURE, TITLE_REQUIRED

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF"


def dune(**overrides) -> BookReviewWrite:
    values = {"title": "Dune", "author": "Herbert", "rating": 5, "read_date": "2023-01-01", "review": "Great"}
    values.update(overrides)
    return BookReviewWrite(**values)


def mock_client(handler) -> BookReviewClient:
    return BookReviewClient(base_url="http://testserver", transport=httpx.MockTransport(handler))


def refuse_connection(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestBookReviewClient:
    """BookReviewClient against the in-process API."""

    @pytest.mark.asyncio
    async def test_create_then_get_round_trips_image(self, review_client):
        created = await review_client.create_review(dune(image=ImageFile("dune.jpg", JPEG_BYTES, "image/jpeg")))

        fetched = await review_client.get_review(created["id"])
        assert fetched["title"] == "Dune"
        assert base64.b64decode(fetched["imageBase64"]) == JPEG_BYTES
        assert fetched["imageMimeType"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_not_found_signal(self, review_client):
        with pytest.raises(BookReviewNotFound):
            await review_client.get_review(999)
        with pytest.raises(BookReviewNotFound):
            await review_client.delete_review(999)
        with pytest.raises(BookReviewNotFound):
            await review_client.update_review(999, dune())

    @pytest.mark.asyncio
    async def test_validation_failure_carries_field_errors(self, review_client):
        with pytest.raises(BookReviewValidationFailed) as exc_info:
            await review_client.create_review(dune(rating=6))
        assert exc_info.value.status_code == 400
        assert "rating" in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_writes_without_image_are_multipart(self):
        requests = []

        def record(request):
            requests.append(request)
            if request.method == "POST":
                return httpx.Response(201, json={"id": 1})
            return httpx.Response(204)

        client = mock_client(record)
        await client.create_review(dune())
        await client.update_review(1, dune())
        await client.aclose()

        assert [request.method for request in requests] == ["POST", "PUT"]
        for request in requests:
            assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
            assert b'name="readDate"\r\n\r\n2023-01-01' in request.content
            assert b"filename=" not in request.content

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = mock_client(refuse_connection)
        with pytest.raises(BookReviewApiError) as exc_info:
            await client.list_reviews()
        assert exc_info.value.status_code is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_server_error_and_bad_json(self):
        client = mock_client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(BookReviewApiError) as exc_info:
            await client.list_reviews()
        assert exc_info.value.status_code == 500
        await client.aclose()

        client = mock_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(BookReviewApiError):
            await client.list_reviews()
        await client.aclose()


class TestBookForm:
    """Form state, per-field validation and submission."""

    @pytest.mark.asyncio
    async def test_change_and_blur_validate_one_field(self):
        form = BookForm(self._never_called)

        assert form.change("title", "  ") is False
        assert form.errors["title"] == TITLE_REQUIRED
        assert form.errors["author"] == ""

        form.author = "J. R. R. Tolkien"
        assert form.blur("author") is False
        assert form.errors["author"] == AUTHOR_LETTERS_ONLY

        assert form.change("title", "The Hobbit") is True
        assert form.errors["title"] == ""

    @pytest.mark.asyncio
    async def test_future_read_date_uses_current_day(self):
        form = BookForm(self._never_called, today=lambda: date(2024, 1, 1))
        assert form.change("readDate", "2024-01-02") is False
        assert form.errors["readDate"] == READ_DATE_IN_FUTURE

    @pytest.mark.asyncio
    async def test_oversized_image_is_refused(self):
        form = BookForm(self._never_called)
        assert form.set_image(ImageFile("big.jpg", b"x" * (5 * 1024 * 1024 + 1))) is False
        assert form.errors["image"] == IMAGE_TOO_LARGE
        assert form.image is None

    @pytest.mark.asyncio
    async def test_invalid_submit_never_calls_handler(self):
        form = BookForm(self._never_called)
        form.change("title", "Dune")

        assert await form.submit() is False
        assert form.errors["author"] != ""
        assert form.errors["review"] != ""

    @pytest.mark.asyncio
    async def test_create_form_resets_after_success(self):
        received = []

        async def handler(review):
            received.append(review)
            return True

        form = BookForm(handler)
        self._fill(form)
        form.set_image(ImageFile("c.jpg", JPEG_BYTES, "image/jpeg"))

        assert await form.submit() is True
        assert received[0].form_data() == {
            "title": "Dune", "author": "Herbert", "rating": "4", "readDate": "2023-01-01", "review": "Great",
        }
        assert dict(received[0].parts())["image"][1] == JPEG_BYTES
        assert (form.title, form.author, form.rating, form.read_date, form.review, form.image) == ("", "", 1, "", "", None)

    @pytest.mark.asyncio
    async def test_create_form_keeps_values_after_failure(self):
        async def handler(review):
            return False

        form = BookForm(handler)
        self._fill(form)
        assert await form.submit() is False
        assert form.title == "Dune"

    @pytest.mark.asyncio
    async def test_handler_exception_is_logged_not_raised(self):
        async def handler(review):
            raise RuntimeError("boom")

        form = BookForm(handler)
        self._fill(form)
        assert await form.submit() is False

    @pytest.mark.asyncio
    async def test_edit_form_populates_once_and_never_resets(self):
        async def handler(review):
            return True

        form = BookForm(handler, is_edit=True, button_text="Update Book Review")
        form.populate({"title": "Dune", "author": "Herbert", "rating": 3, "readDate": "2023-01-01", "review": "Ok"})
        form.populate({"title": "Other", "author": "Someone", "rating": 1, "readDate": "2022-01-01", "review": "No"})
        assert form.title == "Dune"
        assert form.rating == 3

        assert await form.submit() is True
        assert form.title == "Dune"

    @staticmethod
    def _fill(form):
        form.change("title", "Dune")
        form.change("author", "Herbert")
        form.change("rating", 4)
        form.change("readDate", "2023-01-01")
        form.change("review", "Great")

    @staticmethod
    async def _never_called(review):
        raise AssertionError("submit handler must not run")


class TestViews:
    """List, detail, add and edit screens."""

    @pytest.mark.asyncio
    async def test_list_view_empty(self, review_client):
        view = BookListView(review_client)
        await view.load()
        assert view.loading is False
        assert view.status_message == NO_BOOKS
        assert view.cards == []

    @pytest.mark.asyncio
    async def test_list_view_cards_and_confirmed_delete(self, review_client):
        with_image = await review_client.create_review(dune(image=ImageFile("c.jpg", JPEG_BYTES, "image/jpeg")))
        without_image = await review_client.create_review(dune(title="Emma", author="Jane Austen"))

        view = BookListView(review_client)
        await view.load()
        cards = {card.id: card for card in view.cards}
        assert cards[with_image["id"]].image_src.startswith("data:image/jpeg;base64,")
        assert cards[without_image["id"]].image_src == PLACEHOLDER_IMAGE
        assert cards[without_image["id"]].edit_path == f"/edit-book/{without_image['id']}"

        view.request_delete(with_image["id"])
        assert view.confirmation_message == DELETE_CONFIRMATION
        view.cancel_delete()
        assert view.confirmation_message is None
        assert len(view.books) == 2

        view.request_delete(with_image["id"])
        assert await view.confirm_delete() is True
        assert [book["id"] for book in view.books] == [without_image["id"]]
        with pytest.raises(BookReviewNotFound):
            await review_client.get_review(with_image["id"])

    @pytest.mark.asyncio
    async def test_list_view_delete_failure_keeps_item(self, review_client):
        created = await review_client.create_review(dune())
        view = BookListView(review_client)
        await view.load()
        await review_client.delete_review(created["id"])

        view.request_delete(created["id"])
        assert await view.confirm_delete() is False
        assert view.alert == DELETE_ERROR
        assert len(view.books) == 1
        assert view.pending_delete is None

    @pytest.mark.asyncio
    async def test_list_view_load_error(self):
        client = mock_client(refuse_connection)
        view = BookListView(client)
        await view.load()
        assert view.error == LIST_LOAD_ERROR
        assert view.status_message == LIST_LOAD_ERROR
        await client.aclose()

    @pytest.mark.asyncio
    async def test_detail_view(self, review_client):
        created = await review_client.create_review(dune(rating=3, image=ImageFile("c.jpg", JPEG_BYTES, "image/jpeg")))

        view = BookDetailView(review_client)
        await view.load(created["id"])

        assert view.book["title"] == "Dune"
        assert view.book["image"] == "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()
        assert view.stars == ["★", "★", "★", "☆", "☆"]
        assert view.edit_path == f"/edit-book/{created['id']}"

    @pytest.mark.asyncio
    async def test_detail_view_not_found(self, review_client):
        view = BookDetailView(review_client)
        await view.load(999)
        assert view.not_found is True
        assert view.redirect_to == "/not-found"
        assert view.error is None

    @pytest.mark.asyncio
    async def test_detail_view_error(self):
        client = mock_client(lambda request: httpx.Response(500))
        view = BookDetailView(client)
        await view.load(1)
        assert view.error == DETAIL_LOAD_ERROR
        await client.aclose()

    @pytest.mark.asyncio
    async def test_add_page(self, review_client):
        page = AddBookPage(review_client)
        TestBookForm._fill(page.form)

        assert await page.form.submit() is True
        assert page.status_message == ADD_SUCCESS
        assert page.form.title == ""
        assert len(await review_client.list_reviews()) == 1

    @pytest.mark.asyncio
    async def test_add_page_failure_messages(self):
        client = mock_client(lambda request: httpx.Response(500))
        page = AddBookPage(client)
        assert await page.handle_add_book(dune()) is False
        assert page.status_message == ADD_FAILED
        await client.aclose()

        client = mock_client(refuse_connection)
        page = AddBookPage(client)
        assert await page.handle_add_book(dune()) is False
        assert page.status_message == UNEXPECTED_ERROR
        await client.aclose()

    @pytest.mark.asyncio
    async def test_edit_page_keeps_image_when_none_chosen(self, review_client):
        created = await review_client.create_review(dune(image=ImageFile("c.jpg", JPEG_BYTES, "image/jpeg")))

        page = EditBookPage(review_client, created["id"])
        await page.load()
        assert page.form.title == "Dune"
        page.form.change("review", "Even better the second time")

        assert await page.form.submit() is True
        assert page.status_message == UPDATE_SUCCESS
        assert page.redirect_to == "/display-books"

        fetched = await review_client.get_review(created["id"])
        assert fetched["review"] == "Even better the second time"
        assert base64.b64decode(fetched["imageBase64"]) == JPEG_BYTES

    @pytest.mark.asyncio
    async def test_edit_page_load_error(self, review_client):
        page = EditBookPage(review_client, 999)
        await page.load()
        assert page.error == EDIT_LOAD_ERROR
        assert page.loading is False


def test_render_stars_bounds():
    assert render_stars(5) == ["★"] * 5
    assert render_stars(1) == ["★", "☆", "☆", "☆", "☆"]
