from pydantic_settings import BaseSettings, SettingsConfigDict


class TimetableSettings(BaseSettings):
    # Log the alignment diagram of every rendered timetable (debug aid)
    TIMETABLE_LOG_ALIGNMENT: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    # Database - No default password for security
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""  # Required via .env
    POSTGRES_DB: str = "timetable_dev"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # Full SQLAlchemy URL, overrides the POSTGRES_* parts when set (e.g. sqlite:// for local runs)
    DATABASE_URL_OVERRIDE: str = ""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False  # Default to False for security

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # Timetable settings (nested)
    timetable: TimetableSettings = TimetableSettings()

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def validate_production_settings(self) -> None:
        """Validate critical settings for production environment.

        Call this during application startup.
        Raises ValueError if production settings are invalid.
        """
        errors = []

        if self.is_production:
            # Check POSTGRES_PASSWORD
            if not self.DATABASE_URL_OVERRIDE and (
                not self.POSTGRES_PASSWORD or self.POSTGRES_PASSWORD == "postgres"
            ):
                errors.append(
                    "POSTGRES_PASSWORD must be set to a secure value in production"
                )

            if self.is_sqlite:
                errors.append("SQLite is not supported in production")

            # Check DEBUG is disabled
            if self.DEBUG:
                errors.append("DEBUG must be False in production")

        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def validate_development_settings(self) -> None:
        """Set sensible defaults for development if not configured."""
        # Use default password for development if not set
        if not self.POSTGRES_PASSWORD and not self.DATABASE_URL_OVERRIDE:
            self.POSTGRES_PASSWORD = "postgres"
            print("WARNING: Using default POSTGRES_PASSWORD for development")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create settings instance
settings = Settings()

# Validate based on environment
if settings.is_production:
    settings.validate_production_settings()
else:
    settings.validate_development_settings()
