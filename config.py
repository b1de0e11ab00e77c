import os
import dotenv

# Load environment variables from .env file
dotenv.load_dotenv()

# Application Constants
APP_NAME = "PlanHaus"
AI_MODEL = os.getenv("AI_MODEL", "gemini-2.0-flash")
SYSTEM_INSTRUCTION = "You are the PlanHaus wedding planning assistant."

# Database Configuration
# Any SQLAlchemy URL works; SQLite is the local default and PostgreSQL the deployed one.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///planhaus.db")

# Redis Cache Configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_CACHE_ENABLED = os.getenv("REDIS_CACHE_ENABLED", "false").lower() == "true"
PROJECT_CACHE_TTL_SECONDS = int(os.getenv("PROJECT_CACHE_TTL_SECONDS", "3600"))

# Google AI Configuration
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")

# AI rate limiting (per user)
AI_RATE_LIMIT_MAX_REQUESTS = int(os.getenv("AI_RATE_LIMIT_MAX_REQUESTS", "5"))
AI_RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("AI_RATE_LIMIT_WINDOW_SECONDS", "300"))
# Rate limit counters live in memory unless this is set to "redis"
RATE_LIMIT_BACKEND = os.getenv("RATE_LIMIT_BACKEND", "memory").lower()

# Base URL used by the prefill orchestrator client
PLANHAUS_API_BASE = os.getenv("PLANHAUS_API_BASE", "http://localhost:8765")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "planhaus.log")

# CORS Origins
CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:5173",
    "http://127.0.0.1",
    "http://127.0.0.1:5173",
    "http://localhost:8765",
    "https://planhaus.app",
]
