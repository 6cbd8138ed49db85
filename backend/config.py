"""Configuration management for PageSift."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

# Search Configuration
SEARCH_MODEL = os.getenv("SEARCH_MODEL", "llama-3.1-8b-instant")
EXCERPT_CHARS = int(os.getenv("EXCERPT_CHARS", "500"))  # characters per page sent to the model
SEARCH_MAX_TOKENS = int(os.getenv("SEARCH_MAX_TOKENS", "256"))
MAX_PROMPT_TOKENS = int(os.getenv("MAX_PROMPT_TOKENS", "100000"))

# Rendering Configuration
THUMBNAIL_SCALE = float(os.getenv("THUMBNAIL_SCALE", "0.5"))
THUMBNAIL_QUALITY = int(os.getenv("THUMBNAIL_QUALITY", "80"))  # JPEG quality, 0-100
RENDER_WORKERS = int(os.getenv("RENDER_WORKERS", "1"))  # 1 = sequential

# Upload Configuration
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "50"))
EXPORT_PREFIX = "extracted_"

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
