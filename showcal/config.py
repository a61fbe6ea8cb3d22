import os

from dotenv import load_dotenv

load_dotenv()

# Upper bound on rule occurrences scanned per generate() call
MAX_CANDIDATES = int(os.getenv("SHOWCAL_MAX_CANDIDATES", "100000"))

LOG_LEVEL = os.getenv("SHOWCAL_LOG_LEVEL", "INFO")

HOST = os.getenv("SHOWCAL_HOST", "127.0.0.1")
PORT = int(os.getenv("SHOWCAL_PORT", "8000"))
