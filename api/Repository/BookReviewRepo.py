from typing import Optional

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select
from sqlalchemy.orm.exc import StaleDataError

from BusinessObjects.dbModels import BookReviewDto
from BusinessObjects.models import BookReviewCreated, BookReviewForm, BookReviewViewModel
from Helper.ImageHelper import StoredImage
from MapperConfig import MapperConfig
from Repository.SqlAlchemySetup import SqlAlchemySetup

MAX_REVIEW_ID = 2**31 - 1  # upper bound of the Integer primary key


class BookReviewRepo:
    #region book reviews
    async def get_all_reviews(self) -> list[BookReviewViewModel]:
        async with SqlAlchemySetup.async_session_maker() as db:
            result = await db.execute(select(BookReviewDto))
            reviews = result.scalars().all()
            logger.info("Book reviews retrieved from DB, count={count}", count=len(reviews))
            return [MapperConfig.to_view_model(review) for review in reviews]

    async def get_review(self, review_id: int) -> BookReviewViewModel:
        if not self.is_storable_id(review_id):
            raise self.not_found(review_id)
        async with SqlAlchemySetup.async_session_maker() as db:
            review = await db.get(BookReviewDto, review_id)
            if review is None:
                raise self.not_found(review_id)
            return MapperConfig.to_view_model(review)

    async def review_exists(self, review_id: int) -> bool:
        if not self.is_storable_id(review_id):
            return False
        async with SqlAlchemySetup.async_session_maker() as db:
            result = await db.execute(
                select(func.count()).select_from(BookReviewDto).where(BookReviewDto.id == review_id)
            )
            return result.scalar_one() > 0

    async def ensure_review_exists(self, review_id: int):
        if not await self.review_exists(review_id):
            raise self.not_found(review_id)

    async def create_review(self, form: BookReviewForm, image: Optional[StoredImage] = None) -> BookReviewCreated:
        async with SqlAlchemySetup.async_session_maker() as db:
            dto = MapperConfig.to_dto(form, image)
            try:
                db.add(dto)
                await db.commit()
            except SQLAlchemyError:
                await db.rollback()
                logger.exception("Error creating book review titled {title}", title=form.title)
                raise
            logger.info(
                "Book review created in DB: id={id}, has_image={has_image}",
                id=dto.id,
                has_image=image is not None,
            )
            return MapperConfig.to_created(dto)

    async def update_review(self, review_id: int, form: BookReviewForm, image: Optional[StoredImage] = None):
        """Replaces every scalar field of a review, and its image when a new one is supplied.

        A concurrent modification detected at flush time is reported as not found when the
        row has since disappeared, and propagated otherwise.
        """
        if not self.is_storable_id(review_id):
            raise self.not_found(review_id)
        async with SqlAlchemySetup.async_session_maker() as db:
            review = await db.get(BookReviewDto, review_id)
            if review is None:
                raise self.not_found(review_id)
            MapperConfig.apply_form(review, form, image)
            try:
                await db.commit()
            except StaleDataError:
                await db.rollback()
                if not await self.review_exists(review_id):
                    raise self.not_found(review_id)
                logger.error("Concurrent modification of book review id={id}", id=review_id)
                raise
            except SQLAlchemyError:
                await db.rollback()
                logger.exception("Error updating book review id={id}", id=review_id)
                raise
            logger.info(
                "Book review updated in DB: id={id}, image_replaced={replaced}",
                id=review_id,
                replaced=image is not None,
            )

    async def delete_review(self, review_id: int):
        if not self.is_storable_id(review_id):
            raise self.not_found(review_id)
        async with SqlAlchemySetup.async_session_maker() as db:
            review = await db.get(BookReviewDto, review_id)
            if review is None:
                raise self.not_found(review_id)
            try:
                await db.delete(review)
                await db.commit()
            except StaleDataError:
                await db.rollback()
                if not await self.review_exists(review_id):
                    raise self.not_found(review_id)
                raise
            except SQLAlchemyError:
                await db.rollback()
                logger.exception("Error deleting book review id={id}", id=review_id)
                raise
            logger.info("Book review with id={id} deleted from DB", id=review_id)

    @staticmethod
    def is_storable_id(review_id: int) -> bool:
        """Ids outside the primary key range can never name a stored review."""
        return 1 <= review_id <= MAX_REVIEW_ID

    @staticmethod
    def not_found(review_id: int) -> HTTPException:
        logger.warning("Book review not found in DB with id={id}", id=review_id)
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Book review with ID {review_id} not found")
    #endregion book reviews
