"""Constants for SMS Forwarder."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".sms-forwarder"
SETTINGS_DB_PATH = CONFIG_DIR / "settings.db"
DEFAULT_INBOX_DB_PATH = CONFIG_DIR / "mmssms.db"

# --- Settings keys ---
KEY_SERVER_URL = "server_url"
KEY_EMAIL = "email"
KEY_PASSWORD = "password"
KEY_SENDER_LIST = "sender_list"
KEY_ACCESS_TOKEN = "access_token"
KEY_LAST_FETCH_TIMESTAMP = "last_fetch_timestamp"
KEY_SENT_SMS_IDS = "sent_sms_ids"

# --- Device inbox ---
SMS_TYPE_INBOX = 1  # Telephony.Sms.MESSAGE_TYPE_INBOX

# --- Remote API ---
AUTH_PATH = "api/v1/auth/authenticate"
SEND_SMS_PATH = "api/v1/genAi"
API_TIMEOUT = 30.0  # seconds

# --- Display ---
TIMESTAMP_FORMAT = "%d %b %Y %H:%M"  # e.g. "14 Nov 2023 22:13"
SENT_SUFFIX = "\n SMS Received at :"
BODY_PREVIEW_LIMIT = 80
