"""
Configuration and shared helpers
"""

import os
import hashlib
import secrets
import string
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Load .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'nh_console')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

# Users whose email is listed here always get the admin preset
ADMIN_EMAILS = [
    e.strip().lower()
    for e in os.environ.get('ADMIN_EMAILS', '').split(',')
    if e.strip()
]

# ==================== BUSINESS RULES ====================

TAX_RATE = float(os.environ.get('TAX_RATE', '18'))  # percent
REFERRAL_REWARD_AMOUNT = float(os.environ.get('REFERRAL_REWARD_AMOUNT', '500'))
REFERRAL_CODE_PREFIX = os.environ.get('REFERRAL_CODE_PREFIX', 'NH')
REFERRAL_LOOKUP_TIMEOUT = float(os.environ.get('REFERRAL_LOOKUP_TIMEOUT', '3.0'))  # seconds
UNPAID_INVOICE_ALERT_DAYS = int(os.environ.get('UNPAID_INVOICE_ALERT_DAYS', '7'))
SESSION_DAYS = int(os.environ.get('SESSION_DAYS', '7'))


# ==================== HELPERS ====================

def hash_password(password: str) -> str:
    """Hash a password with SHA256"""
    return hashlib.sha256(password.encode()).hexdigest()

def generate_token() -> str:
    """Generate a secure session token"""
    return secrets.token_urlsafe(32)

def generate_share_token() -> str:
    """Random 20-char token used in public invoice links"""
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(20))

def now_iso() -> str:
    """Current UTC date/time as ISO string"""
    return datetime.now(timezone.utc).isoformat()

def is_admin_email(email: str) -> bool:
    if not email:
        return False
    return email.lower().strip() in ADMIN_EMAILS
