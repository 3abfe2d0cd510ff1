from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
import time
import logging

from app.core.config import settings
from app.core.errors import (
    ImageReadError,
    NoImageSelected,
    NothingToTranslate,
    PipelineBusyError,
    PipelineError,
    ResponseParseError,
    TransportError,
)
from app.models.pipeline import PipelineStatus, TargetLanguage
from app.models.responses import (
    ImagePreviewResponse,
    ImageSelectedResponse,
    LanguageInfo,
    LanguageRequest,
    LanguagesResponse,
    PipelineSnapshot,
    ProcessResponse,
)
from app.services.image_service import ImageService
from app.services.pipeline_service import PipelineService

logger = logging.getLogger(__name__)

router = APIRouter()

# Initialize services (singleton pattern)
image_service = ImageService()
pipeline_service = PipelineService(
    settings.pipeline_config,
    image_service=image_service,
    target_language=settings.DEFAULT_TARGET_LANGUAGE
)

# One-shot failures, most specific first
ERROR_STATUS_CODES = [
    (NoImageSelected, status.HTTP_400_BAD_REQUEST),
    (ImageReadError, status.HTTP_400_BAD_REQUEST),
    (NothingToTranslate, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ResponseParseError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (TransportError, status.HTTP_502_BAD_GATEWAY),
]


def get_pipeline() -> PipelineService:
    return pipeline_service


def error_status_code(error: PipelineError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def read_image_upload(image: UploadFile):
    """Validate and read an uploaded image"""
    if not image_service.is_image_content_type(image.content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported content type: {image.content_type or 'unknown'}. An image is required"
        )

    # Reject on the declared size before loading the upload into memory
    if image.size is not None:
        check_upload_size(image.size)

    try:
        source = await image_service.read_upload(image)
    except ImageReadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    check_upload_size(source.size)
    return source


def check_upload_size(size: int):
    if size > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image too large. Maximum: {settings.MAX_UPLOAD_SIZE} bytes, Found: {size}"
        )


@router.get("/languages", response_model=LanguagesResponse)
async def list_languages():
    """Target languages the extracted text can be translated into"""
    return LanguagesResponse(
        languages=[
            LanguageInfo(code=language, name=language.display_name)
            for language in TargetLanguage
        ],
        default=TargetLanguage.from_code(settings.DEFAULT_TARGET_LANGUAGE)
    )


@router.get("/status", response_model=PipelineSnapshot)
async def get_status(pipeline: PipelineService = Depends(get_pipeline)):
    return pipeline.snapshot()


@router.put("/image", response_model=ImageSelectedResponse)
async def select_image(
    image: UploadFile = File(...),
    pipeline: PipelineService = Depends(get_pipeline)
):
    """
    Select the image for the next run

    Clears previous results. A run still in flight is superseded and its
    results are discarded.
    """
    source = await read_image_upload(image)
    pipeline.set_source_image(source)

    return ImageSelectedResponse(
        filename=source.filename,
        mime_type=source.mime_type,
        size=source.size
    )


@router.get("/image", response_model=ImagePreviewResponse)
async def get_image(pipeline: PipelineService = Depends(get_pipeline)):
    """The selected image as a data URL, for previews"""
    source = pipeline.source_image
    if source is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No image selected"
        )
    return ImagePreviewResponse(
        filename=source.filename,
        mime_type=source.mime_type,
        size=source.size,
        data_url=image_service.to_data_url(source)
    )


@router.delete("/image", response_model=PipelineSnapshot)
async def clear_image(pipeline: PipelineService = Depends(get_pipeline)):
    pipeline.set_source_image(None)
    return pipeline.snapshot()


@router.put("/language", response_model=PipelineSnapshot)
async def select_language(
    request: LanguageRequest,
    pipeline: PipelineService = Depends(get_pipeline)
):
    """Choose the target language for the next run"""
    pipeline.set_target_language(request.target_language)
    return pipeline.snapshot()


@router.post("/run", response_model=PipelineSnapshot)
async def run_pipeline(pipeline: PipelineService = Depends(get_pipeline)):
    """
    Extract Hindi text from the selected image and translate it

    Pipeline failures are reported in the returned status, not as HTTP errors.
    """
    try:
        return await pipeline.run()
    except PipelineBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.post("/process", response_model=ProcessResponse)
async def process_image(
    image: UploadFile = File(...),
    target_language: TargetLanguage = Form(TargetLanguage.ENGLISH),
    pipeline: PipelineService = Depends(get_pipeline)
):
    """
    Extract and translate one image without touching the shared pipeline state

    Returns:
        ProcessResponse with both texts
    """
    start_time = time.time()
    source = await read_image_upload(image)

    runner = pipeline.fork()
    runner.set_target_language(target_language)
    runner.set_source_image(source)
    result = await runner.run()

    if result.status != PipelineStatus.SUCCEEDED:
        raise HTTPException(
            status_code=error_status_code(runner.error),
            detail=result.error_message
        )

    return ProcessResponse(
        filename=source.filename,
        target_language=target_language,
        extracted_text=result.extracted_text,
        translated_text=result.translated_text,
        processing_time_seconds=round(time.time() - start_time, 2)
    )
