"""
Sesión de base de datos compartida.
Proporciona acceso consistente a la BD (SQLite por defecto, PostgreSQL opcional).
"""
import time
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import OperationalError, DisconnectionError
from shared.config.settings import settings

logger = logging.getLogger(__name__)

def create_engine_with_ssl_config(database_url: str = settings.DATABASE_URL):
    """
    Crea un engine de SQLAlchemy con configuración SSL optimizada para PostgreSQL.
    """
    if database_url.startswith("sqlite"):
        # Configuración específica para SQLite
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
            pool_recycle=3600
        )
    else:
        # Configuración optimizada para PostgreSQL con SSL
        connect_args = {}

        # Configuración SSL para PostgreSQL
        if "postgresql" in database_url.lower():
            connect_args.update({
                "sslmode": "require",  # Requerir SSL
                "connect_timeout": 10,  # Timeout de conexión
                "application_name": "vox_pulse",  # Identificador de aplicación
                "keepalives_idle": 30,  # Keepalive cada 30 segundos
                "keepalives_interval": 10,  # Intervalo de keepalive
                "keepalives_count": 5,  # Número de keepalives antes de cerrar
            })

        return create_engine(
            database_url,
            pool_size=5,
            max_overflow=10,
            pool_recycle=1800,  # Reciclar conexiones cada 30 minutos
            pool_pre_ping=True,  # Verificar conexión antes de usar
            pool_timeout=30,  # Timeout para obtener conexión del pool
            connect_args=connect_args,
            echo=False  # Desactivar logging SQL para producción
        )

# Crear el engine con configuración optimizada
engine = create_engine_with_ssl_config()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configurar SQLite para mejor rendimiento."""
    if settings.DATABASE_URL.startswith("sqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA cache_size=10000")
        cursor.execute("PRAGMA temp_store=MEMORY")
        cursor.close()

def get_db_with_retry(session_factory=None, max_retries=3, retry_delay=1):
    """
    Abre una sesión y verifica la conexión, reintentando ante caídas de red/BD.

    Args:
        session_factory: Fábrica de sesiones (SessionLocal por defecto)
        max_retries: Número máximo de intentos
        retry_delay: Espera base entre intentos en segundos (crece linealmente)

    Returns:
        Session: Sesión con conexión verificada
    """
    factory = session_factory or SessionLocal
    for attempt in range(max_retries):
        db = factory()
        try:
            db.execute(text("SELECT 1"))
            return db
        except (OperationalError, DisconnectionError) as e:
            db.close()
            logger.warning(f"⚠️ Conexión a BD falló (intento {attempt + 1}/{max_retries}): {e}")
            if attempt == max_retries - 1:
                logger.error(f"❌ Sin conexión a BD tras {max_retries} intentos")
                raise
            time.sleep(retry_delay * (attempt + 1))

def init_database(bind=None):
    """
    Crea las tablas de keywords, posts y comentarios si no existen.
    """
    try:
        from shared.database.models import Base
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"❌ Error inicializando base de datos: {e}")
        raise

@contextmanager
def get_db_session(session_factory=None):
    """
    Sesión de trabajo para los repositorios: conexión verificada con reintentos,
    rollback ante cualquier excepción y cierre garantizado.
    """
    db = get_db_with_retry(session_factory)
    try:
        yield db
    except Exception:
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.warning(f"⚠️ Error en rollback: {rollback_error}")
        raise
    finally:
        try:
            db.close()
        except Exception as e:
            logger.warning(f"⚠️ Error cerrando sesión de BD: {e}")

def health_check(session_factory=None) -> bool:
    """True si la base de datos responde tras los reintentos."""
    try:
        with get_db_session(session_factory) as db:
            db.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"❌ Health check falló: {e}")
        return False
