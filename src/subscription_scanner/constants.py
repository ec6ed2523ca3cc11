"""Constants for Subscription Scanner."""

from decimal import Decimal
from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".subscription-scanner"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"
STORE_DB_PATH = CONFIG_DIR / "store.db"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
BATCH_SIZE = 50  # messages per BatchHttpRequest
PAGE_SIZE = 500  # messages per list page
DEFAULT_MAX_RESULTS = 100
RETRYABLE_STATUSES = (429, 500, 503)
AUTH_FAILURE_STATUSES = (401, 403)

# --- Generic subscription vocabulary (drives the default search query) ---
SUBSCRIPTION_KEYWORDS = [
    "subscription",
    "trial",
    "renewal",
    "membership",
    "invoice",
    "receipt",
]
DEFAULT_QUERY = "subject:(" + " OR ".join(SUBSCRIPTION_KEYWORDS) + ")"

# --- Confidence weights (additive, sum to 1.0) ---
CONFIDENCE_WEIGHTS = {
    "price": 0.3,
    "billing_cycle": 0.2,
    "renewal_date": 0.2,
    "provider": 0.2,
    "subscription_keyword": 0.1,
}
SUBSCRIPTION_BONUS_TERM = "subscription"

# --- Acceptance ---
DEFAULT_THRESHOLD = 0.7
CONFIDENCE_HIGH = 0.7
CONFIDENCE_MEDIUM = 0.5

# --- Sentinels ---
UNKNOWN_PROVIDER = "Unknown Provider"
UNKNOWN_NAME = "Unknown Subscription"

# --- Known subscription services (canonical spelling) ---
KNOWN_SERVICES = [
    "Netflix",
    "Spotify",
    "Amazon",
    "Apple",
    "Google",
    "Microsoft",
    "Adobe",
    "Disney+",
    "Hulu",
    "YouTube",
    "HBO Max",
    "Paramount+",
    "Peacock",
    "Audible",
    "Dropbox",
    "iCloud",
    "LinkedIn",
    "Slack",
    "Zoom",
    "GitHub",
    "Notion",
    "Canva",
    "Duolingo",
    "NordVPN",
    "Patreon",
]

# --- Import defaults ---
IMPORT_CATEGORY = "Imported"
IMPORT_STATUS = "active"
IMPORT_DEFAULT_CYCLE = "monthly"

# --- Spending and renewals ---
WEEKS_PER_MONTH = Decimal("4.33")
UPCOMING_RENEWAL_DAYS = 30
