# -------------------------------------------------
#  Provider limits & throttling switches for the search pipeline
# -------------------------------------------------
import os
from dotenv import load_dotenv

# CSE_* overrides may live in the project .env
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

CSE_ENDPOINT = "https://www.googleapis.com/customsearch/v1"

CSE_PAGE_SIZE           = int(os.getenv("CSE_PAGE_SIZE", "10"))         # Google CSE maximum per request
CSE_MAX_START_INDEX     = int(os.getenv("CSE_MAX_START_INDEX", "91"))   # CSE refuses start > 91 (100 results total)
CSE_DEFAULT_MAX_RESULTS = int(os.getenv("CSE_DEFAULT_MAX_RESULTS", "100"))
CSE_PAGE_DELAY          = float(os.getenv("CSE_PAGE_DELAY", "0.1"))     # seconds between pages of one window
CSE_TIMEOUT             = 20

# ---- Gemini filter ------------------------------------------------
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

DISALLOWED_INGREDIENTS = ["pork", "bacon", "ham", "lard", "wine", "beer", "rum"]

MULTI_WINDOW_LABEL = "Multiple time ranges"
