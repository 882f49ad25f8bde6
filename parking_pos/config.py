from pydantic_settings import BaseSettings
from typing import List, Literal

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./parking.db"
    DB_ECHO: bool = False
    
    # Fees
    DEFAULT_FEE_SCHEDULE: Literal["standard", "legacy"] = "standard"
    CURRENCY: str = "PHP"
    
    # Application
    PROJECT_NAME: str = "Parking POS"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:8081", "http://localhost:19006"]  # Expo dev servers
    
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")
    
    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
