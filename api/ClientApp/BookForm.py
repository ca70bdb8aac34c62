from datetime import date
from typing import Awaitable, Callable, Optional

from loguru import logger

from ClientApp.BookReviewClient import BookReviewWrite, ImageFile
from Helper.ValidationHelper import MAX_IMAGE_BYTES, ValidationHelper

SubmitHandler = Callable[[BookReviewWrite], Awaitable[bool]]

# wire field name -> form attribute
FIELD_ATTRIBUTES = {
    "title": "title",
    "author": "author",
    "rating": "rating",
    "readDate": "read_date",
    "review": "review",
}


class BookForm:
    """Form state shared by the add and edit screens.

    Each field is held on its own and validated on change and on blur. ``submit``
    re-validates everything and only then hands the write shape to ``on_submit``,
    which returns True when the request succeeded.
    """

    def __init__(self, on_submit: SubmitHandler, is_edit: bool = False, button_text: str = "Add Book",
                 today: Optional[Callable[[], date]] = None):
        self.on_submit = on_submit
        self.is_edit = is_edit
        self.button_text = button_text
        self._today = today or date.today
        self._populated = False
        self.errors = {field: "" for field in (*FIELD_ATTRIBUTES, "image")}
        self.reset()

    def reset(self):
        self.title = ""
        self.author = ""
        self.rating = 1
        self.read_date = ""
        self.review = ""
        self.image: Optional[ImageFile] = None

    def populate(self, book_data: Optional[dict]):
        """Pre-fills the fields from a fetched review. Only the first call has any effect."""
        if self._populated or not book_data:
            return
        self.title = book_data.get("title") or ""
        self.author = book_data.get("author") or ""
        self.rating = book_data.get("rating") or 1
        self.read_date = book_data.get("readDate") or ""
        self.review = book_data.get("review") or ""
        # the stored image stays on the server unless a new file is chosen
        self.image = None
        self._populated = True

    def change(self, field: str, value) -> bool:
        setattr(self, FIELD_ATTRIBUTES[field], value)
        return self.validate_field(field)

    def blur(self, field: str) -> bool:
        return self.validate_field(field)

    def set_image(self, image: Optional[ImageFile]) -> bool:
        if image is None:
            self.image = None
            self.errors["image"] = ""
            return True
        message = ValidationHelper.validate_image_size(image.size, MAX_IMAGE_BYTES)
        if message:
            self.errors["image"] = message
            return False
        self.image = image
        self.errors["image"] = ""
        return True

    def validate_field(self, field: str) -> bool:
        value = getattr(self, FIELD_ATTRIBUTES[field])
        if field == "title":
            message = ValidationHelper.validate_title(value)
        elif field == "author":
            message = ValidationHelper.validate_author(value)
        elif field == "rating":
            message = ValidationHelper.validate_rating(value)
        elif field == "readDate":
            message = ValidationHelper.validate_read_date(value, self._today())
        else:
            message = ValidationHelper.validate_review(value)
        self.errors[field] = message
        return not message

    def validate_all(self) -> bool:
        results = [self.validate_field(field) for field in FIELD_ATTRIBUTES]
        return all(results) and not self.errors["image"]

    def to_write_shape(self) -> BookReviewWrite:
        return BookReviewWrite(
            title=self.title,
            author=self.author,
            rating=int(self.rating),
            read_date=self.read_date,
            review=self.review,
            image=self.image,
        )

    async def submit(self) -> bool:
        if not self.validate_all():
            logger.debug("Book form blocked, errors={errors}", errors={k: v for k, v in self.errors.items() if v})
            return False
        try:
            succeeded = await self.on_submit(self.to_write_shape())
        except Exception:
            logger.exception("Book form submit handler failed")
            return False
        if succeeded and not self.is_edit:
            self.reset()
        return bool(succeeded)
