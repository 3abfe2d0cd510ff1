class PipelineError(Exception):
    """Base class for every failure the pipeline reports to the user"""

    code = "pipeline_error"
    default_message = "Pipeline processing failed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NoImageSelected(PipelineError):
    code = "no_image_selected"
    default_message = "Please select an image first."


class ImageReadError(PipelineError):
    code = "image_read_error"
    default_message = "Failed to read the selected image."

    def __init__(self, reason: str = None):
        message = f"Failed to read the selected image: {reason}" if reason else None
        super().__init__(message)


class TransportError(PipelineError):
    """The generative API could not be reached or rejected the request"""
    code = "transport_error"
    service = "generative language service"

    def __init__(self, reason: str = None):
        self.reason = reason
        if reason:
            message = f"Failed to reach the {self.service}: {reason}"
        else:
            message = f"Failed to reach the {self.service}."
        super().__init__(message)


class ResponseParseError(PipelineError):
    """The generative API answered without any usable text"""
    code = "response_parse_error"
    default_message = "The generative language service returned no usable text."


class ExtractionTransportError(TransportError):
    code = "extraction_transport_error"
    service = "text extraction service"


class ExtractionParseError(ResponseParseError):
    code = "extraction_parse_error"
    default_message = (
        "Failed to extract Hindi text. This might be due to low-quality image, "
        "blurry text, or no Hindi text detected. Please try another image or "
        "ensure it contains clear Hindi text."
    )


class NothingToTranslate(PipelineError):
    code = "nothing_to_translate"
    default_message = "No Hindi text was extracted to translate."


class TranslationTransportError(TransportError):
    code = "translation_transport_error"
    service = "translation service"


class TranslationParseError(ResponseParseError):
    code = "translation_parse_error"
    default_message = (
        "Failed to translate text. The translation service might be unavailable "
        "or unable to process the extracted text. Please try again."
    )


class PipelineBusyError(PipelineError):
    code = "pipeline_busy"
    default_message = "A pipeline run is already in progress."


class UnsupportedLanguageError(PipelineError, ValueError):
    code = "unsupported_language"

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported target language: {language}")


class UnexpectedPipelineError(PipelineError):
    code = "unexpected_error"
    default_message = (
        "An unexpected error occurred during processing. Please check your "
        "network connection or try again later."
    )
