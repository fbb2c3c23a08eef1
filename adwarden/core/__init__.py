# Core module - config, security, database
from adwarden.core.config import settings
from adwarden.core.database import Base, SessionLocal, AsyncSessionLocal
from adwarden.core.security import get_password_hash, verify_password, create_access_token
