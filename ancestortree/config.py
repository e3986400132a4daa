import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Settings:
    # -------------------------------------------------------
    # Project
    # -------------------------------------------------------
    PROJECT_NAME: str = "AncestorTree API"
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # -------------------------------------------------------
    # Database
    # -------------------------------------------------------
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./ancestortree.db"
    )

    # Render uses postgres:// but SQLAlchemy needs postgresql://
    if DATABASE_URL.startswith("postgres://"):
        DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

    # -------------------------------------------------------
    # Authentication (tokens are issued by Supabase Auth)
    # -------------------------------------------------------
    SUPABASE_JWT_SECRET: str = os.getenv(
        "SUPABASE_JWT_SECRET",
        "supersecretlocalkey123"   # Only used for local dev
    )
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "authenticated")

    # -------------------------------------------------------
    # Privacy policy
    # -------------------------------------------------------
    POLICY_VERSION: str = os.getenv("POLICY_VERSION", "2026-02-26")


# Single instance that is imported everywhere
settings = Settings()
