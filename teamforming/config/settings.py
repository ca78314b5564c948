# teamforming/config/settings.py

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    ADVANCED_SCORE_THRESHOLD: float = 100
    DEFAULT_TEAM_SIZE: int = 5
    FETCH_TIMEOUT_SECONDS: float = 30.0
    SIMULATION_PARTICIPANTS: int = 40
    SIMULATION_GOALS: int = 6

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
