import os
import secrets

class Config:
    DATABASE_URL = os.environ.get("QA_DATABASE_URL", "sqlite:///./anonqa.db")
    SECRET_KEY = os.environ.get("QA_SECRET_KEY", secrets.token_hex(24))
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("QA_ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

    # Web服務配置
    CORS_ORIGINS = os.environ.get("QA_CORS_ORIGINS", "http://localhost:5173").split(",")

    # 初始管理員
    ADMIN_EMAIL = os.environ.get("QA_ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD = os.environ.get("QA_ADMIN_PASSWORD")

    # 郵件通知配置
    RESEND_API_KEY = os.environ.get("RESEND_API_KEY")
    EMAIL_API_URL = os.environ.get("QA_EMAIL_API_URL", "https://api.resend.com/emails")
    EMAIL_FROM = os.environ.get("QA_EMAIL_FROM", "Q&A <notifications@example.com>")
    EMAIL_TIMEOUT = float(os.environ.get("QA_EMAIL_TIMEOUT", 15.0))
    NOTIFY_ON_CREATE = os.environ.get("QA_NOTIFY_ON_CREATE", "true").lower() == "true"

    # 預設部門
    SEED_DEPARTMENTS = os.environ.get("QA_SEED_DEPARTMENTS", "true").lower() == "true"
    DEFAULT_DEPARTMENTS = [
        ("Engineering", "Technical and development team"),
        ("Product", "Product management and design"),
        ("HR", "Human resources and people operations"),
        ("Finance", "Financial operations and accounting"),
        ("Marketing", "Marketing and communications"),
        ("Operations", "General operations and administration"),
        ("Leadership", "Executive team and company leadership"),
    ]

settings = Config()
