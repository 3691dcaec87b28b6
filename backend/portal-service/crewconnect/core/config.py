from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB
    MONGODB_URI: str = "mongodb://mongodb:27017"
    MONGODB_DB_NAME: str = "crewconnect"
    EMPLOYEES_COLLECTION: str = "users"
    ATTENDANCE_COLLECTION: str = "attendances"

    # 결재 링크 토큰
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    APPROVAL_TOKEN_TTL_DAYS: int = 7

    FRONTEND_URL: str = "http://localhost:5173"
    LEAVE_APPROVER_EMAIL: str = "approver@example.com"

    # 메일 발송: smtp | relay | console
    MAIL_BACKEND: str = "console"
    MAIL_FROM: str = "no-reply@crewconnect.local"
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_STARTTLS: bool = True
    MAIL_RELAY_URL: str = "http://notification-service:8000"

    DEFAULT_TOTAL_LEAVE: int = 25
    MAX_WRITE_RETRIES: int = 5
    APP_TIMEZONE: str = "UTC"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "https://crewconnect-employeeportal.netlify.app",
    ]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"  # .env 파일을 통해 환경 변수 관리


settings = Settings()


def get_settings() -> Settings:
    """FastAPI 의존성 주입용. 테스트에서는 dependency_overrides로 교체한다."""
    return settings
