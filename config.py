"""Application configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
DB_PATH = DATA_DIR / "gadgetpress.db"
IMAGES_DIR = DATA_DIR / "images"

# Ensure directories exist
DATA_DIR.mkdir(exist_ok=True)
IMAGES_DIR.mkdir(exist_ok=True)

# Database (local store used when no hosted backend is configured)
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")

# Hosted backend (PostgREST-style API). Leave empty to use DATABASE_URL.
BACKEND_URL = os.getenv("BACKEND_URL", "").rstrip("/")
BACKEND_KEY = os.getenv("BACKEND_KEY", "")
BACKEND_TIMEOUT_SECONDS = 15

# Object storage: uploaded images are served from /images/<folder>/<file>
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")
IMAGE_FOLDERS = ("main", "gallery")

# Page sizes
ARTICLE_PAGE_SIZE = 6
SIDEBAR_PAGE_SIZE = 5
PRODUCT_PAGE_SIZE = 8
SEARCH_RESULT_LIMIT = 5
COMPARE_CANDIDATE_LIMIT = 10
HOME_MOBILE_LIMIT = 8

# Slot limits (checked client-side before the mutating call)
MAX_HOME_FEATURED = 6
MAX_CATEGORY_FEATURED = 7
MAX_COMPARE = 3

# Landing-surface fetches are the only ones retried
LANDING_FETCH_RETRIES = 2
LANDING_FETCH_RETRY_DELAY = 1.0

# Display
CURRENCY_SYMBOL = "₹"
NOT_AVAILABLE = "N/A"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# App settings
APP_TITLE = "Gadget Press"
APP_PORT = int(os.getenv("APP_PORT", "8080"))
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
