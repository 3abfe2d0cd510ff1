from pathlib import Path
from typing import Optional, Union
from fastapi import UploadFile
import aiofiles
import base64
import mimetypes
import logging

from app.core.errors import ImageReadError
from app.models.pipeline import SourceImage

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class ImageService:
    """Service for reading source images and encoding them for the API"""

    @staticmethod
    def encode(data: bytes) -> str:
        """
        Encode raw image bytes as plain base64 (no data URL prefix)

        No content inspection happens here; the bytes are sent as they are.
        """
        return base64.b64encode(data).decode('ascii')

    def to_data_url(self, image: SourceImage) -> str:
        """Build a data URL for previewing the image in a browser"""
        return f"data:{image.mime_type};base64,{self.encode(image.data)}"

    async def read_file(
        self,
        path: Union[str, Path],
        mime_type: Optional[str] = None
    ) -> SourceImage:
        """
        Read an image file from disk

        Args:
            path: Path to the image file
            mime_type: Declared MIME type; guessed from the file name when omitted

        Returns:
            SourceImage with the file contents

        Raises:
            ImageReadError: If the file cannot be read
        """
        path = Path(path)
        try:
            async with aiofiles.open(path, 'rb') as f:
                data = await f.read()
        except OSError as e:
            logger.warning(f"Failed to read image {path}: {e}")
            raise ImageReadError(str(e)) from e

        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE

        logger.debug(f"Read image {path.name} ({len(data)} bytes, {mime_type})")
        return SourceImage(data=data, mime_type=mime_type, filename=path.name)

    async def read_upload(self, file: UploadFile) -> SourceImage:
        """
        Read an uploaded image, trusting its declared content type

        Raises:
            ImageReadError: If the upload cannot be read
        """
        try:
            data = await file.read()
        except OSError as e:
            logger.warning(f"Failed to read upload {file.filename}: {e}")
            raise ImageReadError(str(e)) from e

        mime_type = file.content_type
        if not mime_type and file.filename:
            mime_type = mimetypes.guess_type(file.filename)[0]

        return SourceImage(
            data=data,
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            filename=file.filename
        )

    @staticmethod
    def is_image_content_type(content_type: Optional[str]) -> bool:
        """Check that a declared content type names an image"""
        return bool(content_type) and content_type.startswith('image/')
