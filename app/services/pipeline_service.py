from pathlib import Path
from typing import Optional, Union
import httpx
import logging

from app.core.config import PipelineConfig
from app.core.errors import (
    NoImageSelected,
    NothingToTranslate,
    PipelineBusyError,
    PipelineError,
    UnexpectedPipelineError,
)
from app.models.pipeline import PipelineStatus, SourceImage, TargetLanguage
from app.models.responses import PipelineSnapshot
from app.services.extraction_service import ExtractionService
from app.services.gemini_client import GenerativeLanguageClient
from app.services.image_service import ImageService
from app.services.translation_service import TranslationService

logger = logging.getLogger(__name__)

ImageSource = Union[SourceImage, str, Path, None]


class PipelineService:
    """
    Runs image -> extracted Hindi text -> translated text, one run at a time

    Owns the pipeline status, both result strings and the error message.
    Every observable field is updated between awaits, so readers always see
    a consistent combination.

    Selecting a new image while a run is in flight supersedes that run: it
    still finishes, but its results are discarded and the status returns to
    idle (last selection wins).
    """

    def __init__(
        self,
        config: PipelineConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        client: Optional[GenerativeLanguageClient] = None,
        extraction: Optional[ExtractionService] = None,
        translation: Optional[TranslationService] = None,
        image_service: Optional[ImageService] = None,
        target_language: Union[TargetLanguage, str] = TargetLanguage.ENGLISH
    ):
        self.config = config
        self._owns_client = client is None
        self.client = client or GenerativeLanguageClient(config, http_client=http_client)
        self.extraction = extraction or ExtractionService(self.client)
        self.translation = translation or TranslationService(self.client)
        self.image_service = image_service or ImageService()

        self._source: ImageSource = None
        self._target_language = TargetLanguage.from_code(target_language)
        self._status = PipelineStatus.IDLE
        self._extracted_text: Optional[str] = None
        self._translated_text: Optional[str] = None
        self._error: Optional[PipelineError] = None
        self._generation = 0

    # Observable state

    @property
    def status(self) -> PipelineStatus:
        return self._status

    @property
    def is_busy(self) -> bool:
        return self._status == PipelineStatus.RUNNING

    @property
    def extracted_text(self) -> Optional[str]:
        return self._extracted_text

    @property
    def translated_text(self) -> Optional[str]:
        return self._translated_text

    @property
    def error(self) -> Optional[PipelineError]:
        return self._error

    @property
    def error_message(self) -> Optional[str]:
        return self._error.message if self._error else None

    @property
    def error_code(self) -> Optional[str]:
        return self._error.code if self._error else None

    @property
    def target_language(self) -> TargetLanguage:
        return self._target_language

    @property
    def source_image(self) -> Optional[SourceImage]:
        """The selected image when it is held in memory"""
        return self._source if isinstance(self._source, SourceImage) else None

    @property
    def has_image(self) -> bool:
        return self._source is not None

    def snapshot(self) -> PipelineSnapshot:
        return PipelineSnapshot(
            status=self._status,
            is_busy=self.is_busy,
            extracted_text=self._extracted_text,
            translated_text=self._translated_text,
            error_code=self.error_code,
            error_message=self.error_message,
            target_language=self._target_language,
            target_language_name=self._target_language.display_name,
            has_image=self.has_image
        )

    # Inbound setters

    def set_source_image(self, image: ImageSource):
        """
        Select the image for the next run, or clear it with None

        A path is read when the run starts. Previous results and the error
        message are cleared, and any in-flight run is superseded.
        """
        self._source = image
        self._generation += 1
        self._extracted_text = None
        self._translated_text = None
        self._error = None
        if not self.is_busy:
            self._status = PipelineStatus.IDLE

        if image is None:
            logger.info("Source image cleared")
        else:
            logger.info(f"Source image selected: {self._describe(image)}")

    def set_target_language(self, language: Union[TargetLanguage, str]):
        """
        Choose the language for the next run

        Results already shown are left untouched.

        Raises:
            UnsupportedLanguageError: If the code is not a known target language
        """
        self._target_language = TargetLanguage.from_code(language)
        logger.debug(f"Target language set to {self._target_language.display_name}")

    # Run

    async def run(self) -> PipelineSnapshot:
        """
        Extract and translate the selected image

        Pipeline failures end the run in the failed state and are reported
        through error_code/error_message rather than raised.

        Raises:
            PipelineBusyError: If a run is already in progress
        """
        if self.is_busy:
            raise PipelineBusyError()

        if self._source is None:
            logger.info("Run requested without a source image")
            self._error = NoImageSelected()
            self._status = PipelineStatus.FAILED
            return self.snapshot()

        generation = self._generation
        source = self._source
        language = self._target_language

        self._status = PipelineStatus.RUNNING
        self._extracted_text = None
        self._translated_text = None
        self._error = None
        logger.info(f"Pipeline run started ({self._describe(source)} -> {language.display_name})")

        try:
            image = await self._load(source)
            payload = self.image_service.encode(image.data)

            extracted = await self.extraction.extract(payload, image.mime_type)
            if generation != self._generation:
                return self._discard()
            self._extracted_text = extracted

            if not extracted:
                raise NothingToTranslate()

            translated = await self.translation.translate(extracted, language)
            if generation != self._generation:
                return self._discard()

            self._translated_text = translated
            self._status = PipelineStatus.SUCCEEDED
            logger.info("Pipeline run succeeded")

        except PipelineError as e:
            if generation != self._generation:
                return self._discard()
            logger.warning(f"Pipeline run failed: [{e.code}] {e.message}")
            self._error = e
            self._status = PipelineStatus.FAILED

        except Exception as e:
            logger.error(f"Pipeline run crashed: {e}", exc_info=True)
            if generation != self._generation:
                self._discard()
            else:
                self._error = UnexpectedPipelineError()
                self._status = PipelineStatus.FAILED
            raise

        return self.snapshot()

    async def _load(self, source: ImageSource) -> SourceImage:
        if isinstance(source, SourceImage):
            return source
        return await self.image_service.read_file(source)

    def _discard(self) -> PipelineSnapshot:
        """Drop the results of a superseded run"""
        logger.info("Discarding results of a superseded run")
        self._status = PipelineStatus.IDLE
        return self.snapshot()

    @staticmethod
    def _describe(source: ImageSource) -> str:
        if isinstance(source, SourceImage):
            return f"{source.filename or 'image'} ({source.mime_type}, {source.size} bytes)"
        return str(source)

    def fork(self) -> "PipelineService":
        """A fresh pipeline sharing this one's client and stages, for one-shot runs"""
        return PipelineService(
            self.config,
            client=self.client,
            extraction=self.extraction,
            translation=self.translation,
            image_service=self.image_service,
            target_language=self._target_language
        )

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()
