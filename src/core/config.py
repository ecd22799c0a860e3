"""
Application Configuration

Centralized configuration using Pydantic Settings for type-safe
environment variable management with validation.

Model bootstrap (path, GPU preference) and streaming parameters
(sample rates, window/hop lengths, smoothing) are all configured here.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the directory containing this file, then go up to the repository root
_CONFIG_DIR = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Example: USE_GPU=true or smoothing_factor=0.5
    """

    model_config = SettingsConfigDict(
        env_file=_CONFIG_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Audio2Face Model Configuration (ONNX)
    onnx_model_path: str = "./pretrained_models/audio2face.onnx"
    use_gpu: bool = False  # Preference only, falls back to CPU
    warmup_on_start: bool = True

    # Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    debug: bool = False
    cors_allowed_origins: str = "*"

    # Audio Configuration
    # Note: Widget sends 24kHz PCM16. The model expects 16kHz float samples.
    input_sample_rate: int = 24000  # Input audio sample rate (widget format)
    model_sample_rate: int = 16000  # Audio2Face model expects 16kHz
    window_length: int = 8320  # Samples per inference window
    hop_length: int = 4160  # Stride between windows (50% overlap)
    smoothing_factor: float = 0.3  # Weight of the previous frame when streaming

    @property
    def window_duration_ms(self) -> float:
        return 1000 * self.window_length / self.model_sample_rate

    @property
    def hop_duration_ms(self) -> float:
        return 1000 * self.hop_length / self.model_sample_rate


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once
    and reused throughout the application lifecycle.
    """
    return Settings()


def get_allowed_origins() -> list[str]:
    """Parse allowed origins from comma-separated string."""
    settings = get_settings()
    if not settings.cors_allowed_origins:
        return []
    return [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]
