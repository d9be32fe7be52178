from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SOURE_", env_file=".env", extra="ignore")

    # A game with no accepted action for this long is ended.
    inactivity_seconds: float = 120.0
    min_players: int = 1
    max_players: int = 4
    board_max_attempts: int = 100
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8001


settings = Settings()
