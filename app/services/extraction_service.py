import logging

from app.core.errors import (
    ExtractionParseError,
    ExtractionTransportError,
    ResponseParseError,
    TransportError,
)
from app.services.gemini_client import GenerativeLanguageClient

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Extract all Hindi text from this image. "
    "Only provide the Hindi text, nothing else."
)


class ExtractionService:
    """Extracts Hindi text from an image with a multimodal model"""

    def __init__(self, client: GenerativeLanguageClient):
        self.client = client

    @staticmethod
    def build_parts(image_base64: str, mime_type: str):
        """Instruction first, inline image second"""
        return [
            {"text": EXTRACTION_PROMPT},
            {
                "inlineData": {
                    "mimeType": mime_type,
                    "data": image_base64
                }
            }
        ]

    async def extract(self, image_base64: str, mime_type: str) -> str:
        """
        Extract Hindi text from a base64 encoded image

        Args:
            image_base64: Plain base64 image payload
            mime_type: MIME type declared for the image

        Returns:
            Extracted text exactly as the model returned it (may be empty)

        Raises:
            ExtractionTransportError: If the API could not be reached
            ExtractionParseError: If the response holds no text
        """
        logger.info(f"Extracting Hindi text from {mime_type} image")

        try:
            text = await self.client.generate_text(self.build_parts(image_base64, mime_type))
        except TransportError as e:
            raise ExtractionTransportError(e.reason) from e
        except ResponseParseError as e:
            logger.warning("Extraction response contained no text")
            raise ExtractionParseError() from e

        logger.info(f"Extracted {len(text)} characters")
        return text
