"""
Configuración compartida del proyecto.
Centraliza todas las variables de entorno y configuraciones.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra='ignore'  # Ignorar campos extra del .env
    )

    PROJECT_NAME: str = "Vox Pulse"
    DATABASE_URL: str = "sqlite:///./vox_pulse.db"  # Fallback por defecto

    # Feeds públicos de Reddit (RSS/Atom + JSON), no requieren credenciales
    REDDIT_USER_AGENT: str = "VoxPulse-RSS-Analyzer/1.0.0"

    # Google Gemini: el análisis con IA requiere el flag y la API key
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    AI_ANALYSIS_ENABLED: bool = True

    # Scheduler de keywords
    SCHEDULER_INTERVAL_MINUTES: int = 30
    AUTO_START_SCHEDULER: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

# Instancia global compartida
settings = Settings()
