from datetime import date

from BusinessObjects.dbModels import BookReviewDto
from BusinessObjects.models import BookReviewForm
from Helper.ImageHelper import StoredImage
from MapperConfig import MapperConfig

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def make_form(**overrides) -> BookReviewForm:
    fields = {"title": "Emma", "author": "Jane Austen", "rating": "4", "readDate": "2022-05-01", "review": "Witty."}
    fields.update(overrides)
    return BookReviewForm.from_form_fields(fields)


def stored_row(**values) -> BookReviewDto:
    row = BookReviewDto(id=7, title="Emma", author="Jane Austen", rating=4, read_date=date(2022, 5, 1), review="Witty.")
    for name, value in values.items():
        setattr(row, name, value)
    return row


def test_form_to_row_without_image():
    row = MapperConfig.to_dto(make_form())

    assert (row.title, row.author, row.rating, row.read_date, row.review) == (
        "Emma", "Jane Austen", 4, date(2022, 5, 1), "Witty.",
    )
    assert row.id is None
    assert row.image is None
    assert row.image_mime_type is None


def test_form_to_row_with_image():
    row = MapperConfig.to_dto(make_form(), StoredImage(PNG_BYTES, "image/png"))
    assert row.image == PNG_BYTES
    assert row.image_mime_type == "image/png"


def test_apply_form_replaces_scalars_and_keeps_image():
    row = stored_row(image=PNG_BYTES, image_mime_type="image/png")

    MapperConfig.apply_form(row, make_form(title="Persuasion", rating="2"))

    assert row.id == 7
    assert row.title == "Persuasion"
    assert row.rating == 2
    assert row.image == PNG_BYTES
    assert row.image_mime_type == "image/png"


def test_row_to_view_model_encodes_image():
    view = MapperConfig.to_view_model(stored_row(image=PNG_BYTES))

    assert view.id == 7
    assert view.read_date == date(2022, 5, 1)
    assert view.image_mime_type == "image/png"
    assert view.model_dump(by_alias=True)["imageBase64"] == "iVBORw0KGgoAAAANSUhEUg=="


def test_row_without_image_has_null_image_fields():
    view = MapperConfig.to_view_model(stored_row())
    assert view.image_base64 is None
    assert view.image_mime_type is None


def test_row_to_created_echo():
    created = MapperConfig.to_created(stored_row(image=PNG_BYTES))
    assert created.model_dump(by_alias=True) == {
        "id": 7, "title": "Emma", "author": "Jane Austen", "rating": 4, "readDate": date(2022, 5, 1), "review": "Witty.",
    }
