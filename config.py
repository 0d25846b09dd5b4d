import os

# ---------------- ADMIN ----------------
ADMIN_USER = os.getenv("ATM_ADMIN_USER", "admin")
ADMIN_PASSWORD = os.getenv("ATM_ADMIN_PASSWORD", "secure_password")

# ---------------- SECURITY ----------------
# any method understood by werkzeug.security.generate_password_hash
PIN_HASH_METHOD = os.getenv("ATM_PIN_HASH_METHOD", "scrypt")

# ---------------- LOGGING ----------------
LOG_LEVEL = os.getenv("ATM_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("ATM_LOG_FILE")

# ---------------- DEMO DATA ----------------
DISABLE_SEED = os.getenv("ATM_DISABLE_SEED", "0") == "1"

# ---------------- MONEY ----------------
CURRENCY_SYMBOL = os.getenv("ATM_CURRENCY_SYMBOL", "₦")
# largest single amount accepted, in currency units with 2 decimal places
MAX_AMOUNT = os.getenv("ATM_MAX_AMOUNT", "1000000.00")
