"""
Pydantic models shared by the report engine, export service and API.

Input models are frozen: the layout engine only ever reads them.
Fields accept both the camelCase keys sent by the web client and
their snake_case Python names.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Frozen(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ProjectSummary(_Frozen):
    """Project a survey belongs to."""
    id: str | None = None
    name: str


class SurveyImage(_Frozen):
    """Metadata of one uploaded survey photo (pixels)."""
    id: str | None = None
    file_name: str = ""
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    display_order: int | None = None


class SurveyDetail(_Frozen):
    """A site survey as shown on the cover and info pages."""
    id: str | None = None
    name: str
    survey_date: str
    memo: str | None = None
    project: ProjectSummary
    created_at: str | None = None
    image_count: int | None = None


class AnnotatedImage(_Frozen):
    """A photo already composited with its annotations."""
    image_info: SurveyImage
    data_url: str


class AnnotatedImageWithComment(AnnotatedImage):
    """A row-block of the three-per-page layout: photo plus operator comment."""
    comment: str | None = None


class GenerateOptions(_Frozen):
    """Section toggles; none of them change geometry."""
    include_cover_page: bool = True
    include_info_section: bool = True
    include_images: bool = True
    include_page_numbers: bool = True


class ReportRequest(_Frozen):
    """Body of ``POST /api/v1/reports``."""
    survey: SurveyDetail
    images: list[AnnotatedImageWithComment] = Field(default_factory=list)
    layout: Literal["standard", "three_per_page"] = "three_per_page"
    options: GenerateOptions = Field(default_factory=GenerateOptions)
