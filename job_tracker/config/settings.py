"""
Job Tracker Configuration
"""
from pydantic import BaseModel
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class DatabaseConfig(BaseModel):
    """Relational store configuration"""
    url: str = os.getenv("DATABASE_URL", "sqlite:///./job_tracker.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


class AuthConfig(BaseModel):
    """Bearer token and password hashing configuration"""
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = os.getenv("JWT_EXPIRES_IN", "7d")  # e.g. 30m, 12h, 7d
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    min_password_length: int = 6


class UploadConfig(BaseModel):
    """Document upload configuration"""
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))
    allowed_mime_types: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


class ServerConfig(BaseModel):
    """HTTP server configuration"""
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3002"))
    environment: str = os.getenv("ENVIRONMENT", "development")
    cors_origins: List[str] = _env_list(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


class TrackerConfig(BaseModel):
    """Main Tracker Configuration"""
    database: DatabaseConfig = DatabaseConfig()
    auth: AuthConfig = AuthConfig()
    uploads: UploadConfig = UploadConfig()
    server: ServerConfig = ServerConfig()

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "logs/job_tracker.log")


# Global config instance
config = TrackerConfig()
