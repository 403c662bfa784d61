import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Token signing secret; read once at startup and never rotated in-process.
    ACCESS_TOKEN_SECRET: str = os.getenv("ACCESS_TOKEN_SECRET", "")
    # bcrypt cost factor (log2 rounds). 10 matches the legacy Node service.
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Balance seeding policy (currency units)
    USER_OPENING_BALANCE: int = int(os.getenv("USER_OPENING_BALANCE", "40"))
    AGENT_OPENING_BALANCE: int = int(os.getenv("AGENT_OPENING_BALANCE", "100000"))

    RECENT_TRANSACTIONS_LIMIT: int = int(os.getenv("RECENT_TRANSACTIONS_LIMIT", "100"))

    # When enabled, approve/block require a bearer token of a live admin account.
    ADMIN_RBAC_ENABLED: bool = os.getenv("ADMIN_RBAC_ENABLED", "false").lower() == "true"

    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"

settings = Settings()
