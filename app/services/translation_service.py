import logging

from app.core.errors import (
    NothingToTranslate,
    ResponseParseError,
    TranslationParseError,
    TranslationTransportError,
    TransportError,
)
from app.models.pipeline import TargetLanguage
from app.services.gemini_client import GenerativeLanguageClient

logger = logging.getLogger(__name__)


def build_translation_prompt(source_text: str, target_language: TargetLanguage) -> str:
    """Instruction naming the target language, followed by the quoted source"""
    return (
        f"Translate the following Hindi text into {target_language.display_name}: "
        f"\n\n\"{source_text}\""
    )


class TranslationService:
    """Translates extracted Hindi text with a text model"""

    def __init__(self, client: GenerativeLanguageClient):
        self.client = client

    async def translate(self, source_text: str, target_language: TargetLanguage) -> str:
        """
        Translate Hindi text into the target language

        Raises:
            NothingToTranslate: If source_text is empty; no request is sent
            TranslationTransportError: If the API could not be reached
            TranslationParseError: If the response holds no text
        """
        if not source_text:
            raise NothingToTranslate()

        target_language = TargetLanguage.from_code(target_language)
        logger.info(f"Translating {len(source_text)} characters into {target_language.display_name}")

        parts = [{"text": build_translation_prompt(source_text, target_language)}]
        try:
            text = await self.client.generate_text(parts)
        except TransportError as e:
            raise TranslationTransportError(e.reason) from e
        except ResponseParseError as e:
            logger.warning("Translation response contained no text")
            raise TranslationParseError() from e

        return text
