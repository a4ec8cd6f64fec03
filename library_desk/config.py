"""
Application configuration loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Sessions
    session_cookie_name: str = "sid"
    bcrypt_rounds: int = 12

    # Librarian account created at startup
    admin_name: str = "Admin Librarian"
    admin_email: str = "admin@example.com"
    admin_password: str = "admin123"

    # Shared secret for the ESP32 readers / motor controller ("" disables)
    device_token: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
