from pydantic_settings import BaseSettings
from pydantic import Field, validator
from dotenv import load_dotenv

load_dotenv("src/backend/.env")

class Settings(BaseSettings):
    # Recording defaults
    RECORDING_VIEWPORT_WIDTH: int = Field(default=1920, description="Viewport width stored on new test drafts")
    RECORDING_VIEWPORT_HEIGHT: int = Field(default=1080, description="Viewport height stored on new test drafts")

    # Healing policy defaults are read from this file at process start, if present
    HEALING_CONFIG_PATH: str = Field(default="config/healing_config.yaml", description="YAML file with initial healing policy")

    # Logging Configuration
    RECORDING_LOG_LEVEL: str = Field(default="INFO", description="Log level for recording components")
    RECORDING_LOG_DIR: str = Field(default="logs", description="Directory for rotating log files")

    @validator('RECORDING_VIEWPORT_WIDTH', 'RECORDING_VIEWPORT_HEIGHT')
    def validate_viewport(cls, v):
        """Validate that viewport dimensions are positive."""
        if v <= 0:
            raise ValueError(f"Viewport dimensions must be positive, got {v}")
        return v

    @validator('RECORDING_LOG_LEVEL')
    def validate_log_level(cls, v):
        """Validate that RECORDING_LOG_LEVEL is a standard logging level."""
        if v.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError(f"RECORDING_LOG_LEVEL must be a standard level name, got '{v}'")
        return v.upper()

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'allow'  # Allow extra fields from .env file

settings = Settings()
