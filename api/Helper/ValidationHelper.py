#region imports
import re
from datetime import date

from pydantic import ValidationError

#endregion imports

MAX_TEXT_LENGTH = 255
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MIN_RATING = 1
MAX_RATING = 5
AUTHOR_PATTERN = re.compile(r"^[A-Za-z\s]+$")

TITLE_REQUIRED = "Title is required."
TITLE_TOO_LONG = f"Title must be at most {MAX_TEXT_LENGTH} characters."
AUTHOR_REQUIRED = "Author name is required."
AUTHOR_LETTERS_ONLY = "Author name should contain only alphabetic characters."
AUTHOR_TOO_LONG = f"Author name must be at most {MAX_TEXT_LENGTH} characters."
RATING_OUT_OF_RANGE = f"Rating must be between {MIN_RATING} and {MAX_RATING}."
READ_DATE_REQUIRED = "Read date is required."
READ_DATE_INVALID = "Read date must be a valid date (YYYY-MM-DD)."
READ_DATE_IN_FUTURE = "Read date cannot be in the future."
REVIEW_REQUIRED = "Review is required."
IMAGE_TOO_LARGE_TEMPLATE = "Image size must be less than {limit}."

VALIDATION_TITLE = "One or more validation errors occurred."


def image_too_large(max_bytes: int = MAX_IMAGE_BYTES) -> str:
    if max_bytes % (1024 * 1024) == 0:
        limit = f"{max_bytes // (1024 * 1024)}MB"
    else:
        limit = f"{max_bytes} bytes"
    return IMAGE_TOO_LARGE_TEMPLATE.format(limit=limit)


IMAGE_TOO_LARGE = image_too_large()

REQUIRED_MESSAGES = {
    "title": TITLE_REQUIRED,
    "author": AUTHOR_REQUIRED,
    "rating": RATING_OUT_OF_RANGE,
    "readDate": READ_DATE_REQUIRED,
    "review": REVIEW_REQUIRED,
}


class ReviewValidationError(Exception):
    """Per-field validation failure for a book review write."""

    def __init__(self, errors: dict[str, list[str]], status_code: int = 400):
        super().__init__(VALIDATION_TITLE)
        self.errors = errors
        self.status_code = status_code

    def to_problem(self) -> dict:
        return ValidationHelper.problem_details(self.errors, self.status_code)


class ValidationHelper:
    """Field rules shared by the client form and the API.

    Every rule returns an error message, or an empty string when the value passes.
    """

    @staticmethod
    def validate_title(title) -> str:
        if title is None or str(title).strip() == "":
            return TITLE_REQUIRED
        if len(title) > MAX_TEXT_LENGTH:
            return TITLE_TOO_LONG
        return ""

    @staticmethod
    def validate_author(author) -> str:
        if author is None or str(author).strip() == "":
            return AUTHOR_REQUIRED
        if not AUTHOR_PATTERN.match(author):
            return AUTHOR_LETTERS_ONLY
        if len(author) > MAX_TEXT_LENGTH:
            return AUTHOR_TOO_LONG
        return ""

    @staticmethod
    def validate_rating(rating) -> str:
        if isinstance(rating, bool):
            return RATING_OUT_OF_RANGE
        try:
            value = int(rating)
        except (TypeError, ValueError):
            return RATING_OUT_OF_RANGE
        if isinstance(rating, float) and rating != value:
            return RATING_OUT_OF_RANGE
        if value < MIN_RATING or value > MAX_RATING:
            return RATING_OUT_OF_RANGE
        return ""

    @staticmethod
    def validate_read_date(read_date, today: date | None = None) -> str:
        if read_date is None or (isinstance(read_date, str) and read_date.strip() == ""):
            return READ_DATE_REQUIRED
        if isinstance(read_date, str):
            try:
                read_date = date.fromisoformat(read_date.strip())
            except ValueError:
                return READ_DATE_INVALID
        elif not isinstance(read_date, date):
            return READ_DATE_INVALID
        if read_date > (today or date.today()):
            return READ_DATE_IN_FUTURE
        return ""

    @staticmethod
    def validate_review(review) -> str:
        if review is None or str(review).strip() == "":
            return REVIEW_REQUIRED
        return ""

    @staticmethod
    def validate_image_size(size: int, max_bytes: int = MAX_IMAGE_BYTES) -> str:
        if size > max_bytes:
            return image_too_large(max_bytes)
        return ""

    @staticmethod
    def validate_fields(title, author, rating, read_date, review, today: date | None = None) -> dict[str, str]:
        """Runs every scalar rule and returns the failures keyed by wire field name."""
        results = {
            "title": ValidationHelper.validate_title(title),
            "author": ValidationHelper.validate_author(author),
            "rating": ValidationHelper.validate_rating(rating),
            "readDate": ValidationHelper.validate_read_date(read_date, today),
            "review": ValidationHelper.validate_review(review),
        }
        return {field: message for field, message in results.items() if message}

    @staticmethod
    def errors_from_pydantic(exc: ValidationError) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field = str(error["loc"][-1]) if error["loc"] else ""
            if error["type"] == "missing" and field in REQUIRED_MESSAGES:
                errors.setdefault(field, []).append(REQUIRED_MESSAGES[field])
                continue
            ctx_error = (error.get("ctx") or {}).get("error")
            message = str(ctx_error) if ctx_error is not None else error["msg"]
            errors.setdefault(field, []).append(message)
        return errors

    @staticmethod
    def problem_details(errors: dict[str, list[str]], status_code: int = 400) -> dict:
        return {"title": VALIDATION_TITLE, "status": status_code, "errors": errors}
