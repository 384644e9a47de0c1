import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# Remote data service (transactions, goals, groups, advice)
DATA_SERVICE_URL = os.getenv("DATA_SERVICE_URL", "http://localhost:5000/api")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))

# Where the login token survives restarts
AUTH_TOKEN_FILE = os.getenv("AUTH_TOKEN_FILE", ".fincoach_token")

# Executors give up on a capability call after this many seconds
EXECUTOR_TIMEOUT = float(os.getenv("EXECUTOR_TIMEOUT", "30"))

# Voice capture
VOICE_MAX_RESTARTS = int(os.getenv("VOICE_MAX_RESTARTS", "3"))

# Optional vars (with defaults)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
PORT = int(os.getenv("PORT", "8000"))
