import os
from dotenv import load_dotenv

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Thooral Website")
API_PREFIX = os.getenv("API_PREFIX", "/api")
PORT = int(os.getenv("PORT", "3000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev_access_secret_change_me")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev_refresh_secret_change_me")
JWT_ALG = "HS256"
ACCESS_TOKEN_EXP_MIN = int(os.getenv("ACCESS_TOKEN_EXP_MIN", "15"))
REFRESH_TOKEN_EXP_DAYS = int(os.getenv("REFRESH_TOKEN_EXP_DAYS", "7"))

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# lifetime of one-time codes/tokens
VERIFICATION_CODE_EXP_MIN = int(os.getenv("VERIFICATION_CODE_EXP_MIN", "2"))
RESET_TOKEN_EXP_MIN = int(os.getenv("RESET_TOKEN_EXP_MIN", "2"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD") or os.getenv("SMTP_PASS")
SMTP_FROM = os.getenv("SMTP_FROM") or SMTP_USER
SMTP_DISABLE = os.getenv("SMTP_DISABLE", "0") == "1"
