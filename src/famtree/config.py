import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Settings:
    # -------------------------------------------------------
    # Project
    # -------------------------------------------------------
    PROJECT_NAME: str = "famtree"
    ENV: str = os.getenv("ENV", "dev")

    # -------------------------------------------------------
    # Media (used to resolve member photo references)
    # -------------------------------------------------------
    MEDIA_BASE_URL: str = os.getenv(
        "MEDIA_BASE_URL",
        "http://127.0.0.1:5000"
    ).rstrip("/")

    # Where bare photo filenames live under the media host
    UPLOADS_PATH: str = "/" + os.getenv("UPLOADS_PATH", "/uploads").strip("/")

    # -------------------------------------------------------
    # Logging
    # -------------------------------------------------------
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


# Single instance that is imported everywhere
settings = Settings()
