#region imports

from sqlalchemy import CheckConstraint, Column, Date, Integer, LargeBinary, String, Text
from BusinessObjects.BaseEntity import BaseEntity
from Repository.SqlAlchemySetup import SqlAlchemySetup

#endregion imports

#region Model def: start
class BookReviewDto(BaseEntity, SqlAlchemySetup.Base):
    __tablename__ = "book_reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_book_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    read_date = Column(Date, nullable=False)
    review = Column(Text, nullable=False)
    image = Column(LargeBinary, nullable=True)  # null means no image
    image_mime_type = Column(String(100), nullable=True)

#endregion Model def: End
