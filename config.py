import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason: Exception, expected: str):
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


def _positive_int(name: str, default: str) -> int:
    try:
        value = int(os.environ.get(name, default))
        if value <= 0:
            raise ValueError(f"{name} must be positive (got: {value})")
        return value
    except ValueError as e:
        _exit_with_config_error(name, e, "Positive integer")


# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    _exit_with_config_error("RUNTIME_ENVIRONMENT", e, f"one of {', '.join(valid_values)}")

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")
DB_BUSY_TIMEOUT_SECONDS = _positive_int("DB_BUSY_TIMEOUT_SECONDS", "15")

# HTTP server
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = _positive_int("WEBAPP_PORT", "5000")

# Admin API gate (empty = disabled, e.g. when an upstream proxy authenticates admins)
ADMIN_API_TOKEN = os.environ.get("ADMIN_API_TOKEN", "")

# Operator alerts via Telegram (optional)
# Both TOKEN and ADMIN_ID_LIST must be set for alerts to be sent
TOKEN = os.environ.get("TOKEN", "")
try:
    _admin_id_list_str = os.environ.get("ADMIN_ID_LIST", "")
    ADMIN_ID_LIST = [int(admin_id.strip()) for admin_id in _admin_id_list_str.split(',') if admin_id.strip()]
except ValueError as e:
    _exit_with_config_error("ADMIN_ID_LIST", e, "comma-separated list of Telegram user IDs (e.g. 123456789,987654321)")

# Storage Gateway
STORAGE_ROOT = os.environ.get("STORAGE_ROOT", "./storage")
STORAGE_PUBLIC_URL = os.environ.get("STORAGE_PUBLIC_URL", "http://localhost:5000/storage").rstrip("/")
PAYMENT_SCREENSHOT_BUCKET = os.environ.get("PAYMENT_SCREENSHOT_BUCKET", "payment_screenshots")
DOCUMENTS_BUCKET = os.environ.get("DOCUMENTS_BUCKET", "order_documents")
PAYMENT_SCREENSHOT_MAX_BYTES = _positive_int("PAYMENT_SCREENSHOT_MAX_BYTES", "5242880")  # 5MB

# Invoice / Shipping Label header
COMPANY_NAME = os.environ.get("COMPANY_NAME", "CycleHub Pvt Ltd")
COMPANY_ADDRESS = os.environ.get("COMPANY_ADDRESS", "Plot 42, Okhla Industrial Estate, Phase III, New Delhi, Delhi 110020")
COMPANY_TAX_ID = os.environ.get("COMPANY_TAX_ID", "GSTIN: 07AABCC1234D1Z5")
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₹")

# Document follow-up task (invoice + shipping label after approval)
DOCUMENT_MAX_ATTEMPTS = _positive_int("DOCUMENT_MAX_ATTEMPTS", "5")
DOCUMENT_RETRY_INTERVAL_SECONDS = _positive_int("DOCUMENT_RETRY_INTERVAL_SECONDS", "300")
DOCUMENT_STALE_PENDING_SECONDS = _positive_int("DOCUMENT_STALE_PENDING_SECONDS", "600")
DOCUMENT_RETRY_JOB_ENABLED = os.environ.get("DOCUMENT_RETRY_JOB_ENABLED", "true") == "true"

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Dev keeps more history for debugging
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
