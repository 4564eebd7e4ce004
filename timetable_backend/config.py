from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_labels(raw: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in raw.split(",") if p.strip())


class Settings(BaseSettings):
    # --- DB ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "Timetable"
    # full URL wins over the DB_* pieces (e.g. sqlite for local runs / tests)
    DATABASE_URL: str = ""

    # --- JWT ---
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 7 * 24 * 60

    # --- Timetable label sets ---
    TIMETABLE_DAYS: str = "Mon,Tue,Wed,Thu,Fri"
    TIMETABLE_SECTIONS: str = "B,D"

    # --- Other ---
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def days(self) -> tuple[str, ...]:
        return _split_labels(self.TIMETABLE_DAYS)

    @property
    def sections(self) -> tuple[str, ...]:
        return _split_labels(self.TIMETABLE_SECTIONS)

    @property
    def cors_origins(self) -> list[str]:
        return list(_split_labels(self.CORS_ORIGINS))


settings = Settings()
