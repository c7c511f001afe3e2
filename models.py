# doc2slides/models.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Slide structures ---
class SlideContent(BaseModel):
    title: str
    bullets: List[str]


class PresentationStructure(BaseModel):
    title: str
    slides: List[SlideContent]


class GoogleDocsContent(BaseModel):
    title: str = "Untitled Document"
    content: str


# --- Templates ---
class RgbColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    red: float
    green: float
    blue: float


class TemplateConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str
    title_color: RgbColor = Field(alias="titleColor")
    body_color: RgbColor = Field(alias="bodyColor")
    background_color: RgbColor = Field(alias="backgroundColor")
    header_color: Optional[RgbColor] = Field(default=None, alias="headerColor")


class TemplateSummary(BaseModel):
    id: str
    name: str
    description: str


# --- Pydantic Models for API ---
# Every field is optional here: the handlers decide between paste and import
# mode and map each missing field to the right status code.
class PreviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_content: Optional[str] = Field(default=None, alias="documentContent")
    google_docs_url: Optional[str] = Field(default=None, alias="googleDocsUrl")
    document_title: Optional[str] = Field(default=None, alias="documentTitle")
    slide_count: Optional[int] = Field(default=None, alias="slideCount")
    custom_prompt: Optional[str] = Field(default=None, alias="customPrompt")
    access_token: Optional[str] = Field(default=None, alias="accessToken")

    @property
    def import_mode(self) -> bool:
        return bool(self.google_docs_url)


class GenerateRequest(PreviewRequest):
    template: Optional[str] = None
    user_email: Optional[str] = Field(default=None, alias="userEmail")


class PreviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    structure: PresentationStructure
    document_title: Optional[str] = Field(default=None, alias="documentTitle")


class GenerateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    slides_url: str = Field(alias="slidesUrl")
    slides_id: str = Field(alias="slidesId")


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
