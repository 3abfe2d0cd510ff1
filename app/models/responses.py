from pydantic import BaseModel
from typing import List, Optional

from app.models.pipeline import PipelineStatus, TargetLanguage


class PipelineSnapshot(BaseModel):
    """Observable state of the pipeline at one point in time"""
    status: PipelineStatus
    is_busy: bool
    extracted_text: Optional[str] = None
    translated_text: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    target_language: TargetLanguage
    target_language_name: str
    has_image: bool


class LanguageInfo(BaseModel):
    """A target language offered to the user"""
    code: TargetLanguage
    name: str


class LanguageRequest(BaseModel):
    """Body for selecting the target language"""
    target_language: TargetLanguage


class LanguagesResponse(BaseModel):
    languages: List[LanguageInfo]
    default: TargetLanguage


class ImageSelectedResponse(BaseModel):
    """Acknowledgement of an uploaded source image"""
    filename: Optional[str]
    mime_type: str
    size: int


class ImagePreviewResponse(ImageSelectedResponse):
    """The selected image as a data URL the browser can display"""
    data_url: str


class ProcessResponse(BaseModel):
    """Response model for the one-shot processing endpoint"""
    filename: Optional[str]
    target_language: TargetLanguage
    extracted_text: str
    translated_text: str
    processing_time_seconds: float
