from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Booking Service"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    ENVIRONMENT: str = "development"

    # Storage
    BOOKINGS_FILE: str = "submissions.json"

    # Scheduling
    MIN_SEPARATION_MINUTES: int = 45

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_FILE: str = "logs/errors.log"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
