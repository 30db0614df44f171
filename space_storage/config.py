# space_storage/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging

# Load variables from .env file located in the project root directory
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)
else:
    load_dotenv() # Fallback

DEFAULT_TEXTILE_HUB_ADDRESS = "http://textile-hub-dev.fleek.co:3007"

class Settings(BaseSettings):
    """Loads configuration settings from environment variables and .env file."""

    # --- Textile Hub Configuration ---
    # TODO: Change the default to the production hub once it is published
    TEXTILE_HUB_ADDRESS: str = DEFAULT_TEXTILE_HUB_ADDRESS
    HUB_REQUEST_TIMEOUT: float = float(os.getenv("HUB_REQUEST_TIMEOUT", 60.0))

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

# Instantiate settings once for import
settings = Settings()

# --- Logging Setup ---
log_level_str = settings.LOG_LEVEL.upper(); log_level = getattr(logging, log_level_str, logging.INFO)
logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - [%(levelname)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
logger = logging.getLogger("SpaceStorage")
logging.getLogger("httpx").setLevel(logging.WARNING); logging.getLogger("httpcore").setLevel(logging.WARNING)

logger.debug(f"Storage settings loaded. Log Level: {log_level_str}")
if not settings.TEXTILE_HUB_ADDRESS:
    logger.warning("TEXTILE_HUB_ADDRESS is empty, bucket clients will need an explicit address.")
else:
    logger.debug(f"Using Textile Hub at: {settings.TEXTILE_HUB_ADDRESS}")
if settings.HUB_REQUEST_TIMEOUT <= 0:
    logger.error(f"Invalid HUB_REQUEST_TIMEOUT: {settings.HUB_REQUEST_TIMEOUT}.")
