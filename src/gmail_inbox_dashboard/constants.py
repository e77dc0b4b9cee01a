"""Constants for Gmail Inbox Dashboard."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".gmail-inbox-dashboard"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"

# --- Environment ---
ACCOUNTS_ENV_VAR = "GMAIL_DASHBOARD_ACCOUNTS"

# --- Gmail API ---
SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.metadata",
]
INBOX_LABEL = "INBOX"
SPAM_LABEL = "SPAM"
EXPORT_CAP = 100  # inbox messages per export, single page
BATCH_SIZE = 50  # messages per BatchHttpRequest
METADATA_HEADERS = ["From"]

# --- Retries ---
MAX_ATTEMPTS = 1  # no retries unless asked for
RETRYABLE_STATUSES = (429, 500, 503)

# --- Export ---
CSV_HEADER = ["Account", "From"]
UNKNOWN_SENDER = "Unknown"
EXPORT_FILENAME_TEMPLATE = "inbox_senders_{email}.csv"
