import os
from dotenv import load_dotenv

load_dotenv()

# ───── Provider (Gemini) ─────
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")

REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "120"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "2"))
POOL_SIZE = 20

# ───── Report thresholds (percent) ─────
HIGH_SIMILARITY_THRESHOLD = 75.0
MEDIUM_SIMILARITY_THRESHOLD = 40.0

# ───── File support ─────
ALLOWED_EXTENSIONS = {"txt", "pdf", "doc", "docx"}
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
PASTED_TEXT_NAME = "Pasted Text"

# ───── Service ─────
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")
