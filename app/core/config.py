import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./subsimplify.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ✅ App
APP_NAME = "SubSimplify API"
APP_VERSION = "1.0.0"
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
FREE_PLAN_SUBSCRIPTION_LIMIT = int(os.getenv("FREE_PLAN_SUBSCRIPTION_LIMIT", "3"))

# ✅ Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
STRIPE_API_VERSION = os.getenv("STRIPE_API_VERSION", "2023-10-16")

# ✅ Razorpay
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
RAZORPAY_API_URL = os.getenv("RAZORPAY_API_URL", "https://api.razorpay.com/v1")

# ✅ Lemon Squeezy
LEMON_SQUEEZY_API_KEY = os.getenv("LEMON_SQUEEZY_API_KEY")
LEMON_SQUEEZY_STORE_ID = os.getenv("LEMON_SQUEEZY_STORE_ID")
LEMON_SQUEEZY_WEBHOOK_SECRET = os.getenv("LEMON_SQUEEZY_WEBHOOK_SECRET")
LEMON_SQUEEZY_API_URL = os.getenv("LEMON_SQUEEZY_API_URL", "https://api.lemonsqueezy.com/v1")

# ✅ Outbound HTTP
IPAPI_URL = os.getenv("IPAPI_URL", "https://ipapi.co")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

REQUIRED_SETTINGS = ["DATABASE_URL", "SECRET_KEY"]


def missing_required_settings() -> list:
    """Names of required environment variables that are not set."""
    return [name for name in REQUIRED_SETTINGS if not os.getenv(name)]
