from typing import Optional

from automapper import mapper
from sqlalchemy import inspect

from BusinessObjects.dbModels import BookReviewDto
from BusinessObjects.models import BookReviewCreated, BookReviewForm, BookReviewViewModel
from Helper.CommonHelper import CommonHelper
from Helper.ImageHelper import ImageHelper, StoredImage


def mapped_columns(target_cls) -> list[str]:
    return [column.key for column in inspect(target_cls).column_attrs]


class MapperConfig:
    #region Automapper: start
    # declarative models only take **kwargs, so their fields are the mapped columns
    mapper.add_spec(BookReviewDto, mapped_columns)
    mapper.add(BookReviewForm, BookReviewDto)
    mapper.add(BookReviewDto, BookReviewViewModel)
    #endregion Automapper: end

    #region Mapping: start
    @staticmethod
    def to_dto(form: BookReviewForm, image: Optional[StoredImage] = None) -> BookReviewDto:
        image_fields = {}
        if image is not None:
            image_fields = {"image": image.data, "image_mime_type": image.mime_type}
        return mapper.to(BookReviewDto).map(form, fields_mapping=image_fields)

    @staticmethod
    def apply_form(dto: BookReviewDto, form: BookReviewForm, image: Optional[StoredImage] = None) -> BookReviewDto:
        """Overwrites every scalar column; the stored image is only replaced when a new one is given."""
        return CommonHelper.copy_fields(MapperConfig.to_dto(form, image), dto)

    @staticmethod
    def to_view_model(dto: BookReviewDto) -> BookReviewViewModel:
        image_fields = {"image_base64": None, "image_mime_type": None}
        if dto.image is not None:
            image_fields = {
                "image_base64": ImageHelper.to_base64(dto.image),
                "image_mime_type": dto.image_mime_type or ImageHelper.detect_mime_type(dto.image),
            }
        return mapper.to(BookReviewViewModel).map(dto, fields_mapping=image_fields)

    @staticmethod
    def to_created(dto: BookReviewDto) -> BookReviewCreated:
        return mapper.to(BookReviewCreated).map(dto)
    #endregion Mapping: end
