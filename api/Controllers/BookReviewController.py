from typing import Optional

from fastapi import Depends, File, Form, Response, UploadFile, status
from loguru import logger

from AppSettings import settings
from BusinessObjects.models import BookReviewCreated, BookReviewForm, BookReviewViewModel
from Helper.ImageHelper import ImageHelper
from Repository.BookReviewRepo import BookReviewRepo
from apiapp import fastapiapp

app = fastapiapp


async def review_form_fields(
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    read_date: Optional[str] = Form(None, alias="readDate"),
    review: Optional[str] = Form(None),
) -> dict:
    return {"title": title, "author": author, "rating": rating, "readDate": read_date, "review": review}


@app.get("/reviews", response_model=list[BookReviewViewModel])
async def getBookReviews(repo: BookReviewRepo = Depends()):
    """Retrieves every book review in the database.

    Returns:
        A JSON array of book reviews. Stored images are sent as base64 with their MIME type.
    """
    return await repo.get_all_reviews()


@app.get("/reviews/{review_id}", response_model=BookReviewViewModel)
async def get_book_review_by_id(review_id: int, repo: BookReviewRepo = Depends()):
    """Retrieves a specific book review by its ID.

    Args:
        review_id: The unique integer identifier of the review to retrieve.

    Returns:
        The matching book review, or a 404 Not Found response if it doesn't exist.
    """
    return await repo.get_review(review_id)


@app.post("/reviews", response_model=BookReviewCreated, status_code=status.HTTP_201_CREATED)
async def postBookReview(
    response: Response,
    fields: dict = Depends(review_form_fields),
    image: Optional[UploadFile] = File(None),
    repo: BookReviewRepo = Depends(),
):
    """Creates a new book review from a multipart form.

    Args:
        fields: The title, author, rating, readDate and review form fields.
        image: Optional cover image file part, stored as raw bytes.

    Returns:
        The created review with its assigned ID and a Location header pointing at it.
        A 400 Bad Request response lists the failing fields; an oversized image gives 413.
    """
    form = BookReviewForm.from_form_fields(fields)
    stored_image = await ImageHelper.read_upload(image, settings.MAX_IMAGE_BYTES)
    created = await repo.create_review(form, stored_image)
    response.headers["Location"] = f"/reviews/{created.id}"
    return created


@app.put("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def updateBookReview(
    review_id: int,
    fields: dict = Depends(review_form_fields),
    image: Optional[UploadFile] = File(None),
    repo: BookReviewRepo = Depends(),
):
    """Replaces an existing book review.

    Every scalar field is overwritten. The stored image is replaced only when a new
    image part is sent; otherwise the previous image is kept.

    Args:
        review_id: The unique integer identifier of the review to update.

    Returns:
        204 No Content on success, 404 if the review doesn't exist (checked before
        validation), 400 for invalid fields and 413 for an oversized image.
    """
    await repo.ensure_review_exists(review_id)
    form = BookReviewForm.from_form_fields(fields)
    stored_image = await ImageHelper.read_upload(image, settings.MAX_IMAGE_BYTES)
    await repo.update_review(review_id, form, stored_image)
    logger.info("Book review id={id} replaced", id=review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deleteBookReview(review_id: int, repo: BookReviewRepo = Depends()):
    """Deletes a book review.

    Returns:
        204 No Content upon successful deletion, or 404 Not Found if the review doesn't exist.
    """
    await repo.delete_review(review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
