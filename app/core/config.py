from dataclasses import dataclass
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit configuration handed to the pipeline orchestrator"""
    api_key: str
    api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.0-flash"
    timeout_seconds: float = 60.0


class Settings(BaseSettings):
    """Application configuration settings"""

    # Application
    APP_NAME: str = "Hindi Image Translator API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Generative Language API
    GEMINI_API_KEY: str = ""
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-2.0-flash"
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    # Uploads
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024  # 20MB

    # Translation
    DEFAULT_TARGET_LANGUAGE: str = "en"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def pipeline_config(self) -> PipelineConfig:
        """Build the orchestrator configuration from settings"""
        return PipelineConfig(
            api_key=self.GEMINI_API_KEY,
            api_base_url=self.GEMINI_API_BASE_URL.rstrip('/'),
            model=self.GEMINI_MODEL,
            timeout_seconds=self.REQUEST_TIMEOUT_SECONDS
        )


settings = Settings()
