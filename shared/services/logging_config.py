import logging
import sys
from pathlib import Path

from shared.config.settings import settings

def setup_logging():
    """
    Configura el sistema de logging para toda la aplicación.
    Logs se mostrarán en consola y se guardarán en archivo.
    """
    # Crear directorio de logs si no existe
    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(exist_ok=True)
    
    # Configurar formato de logs
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    
    # Configurar el logger root
    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[
            # Handler para consola
            logging.StreamHandler(sys.stdout),
            # Handler para archivo
            logging.FileHandler(
                logs_dir / "vox_pulse.log",
                mode='a',
                encoding='utf-8'
            )
        ]
    )
    
    # httpx registra cada request a nivel INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    
    # Configurar logger para la aplicación
    logger = logging.getLogger("vox_pulse")
    logger.setLevel(level)
    
    return logger

def get_logger(name: str):
    """
    Obtiene un logger con el nombre especificado.
    
    Args:
        name: Nombre del logger (generalmente __name__)
    
    Returns:
        Logger configurado
    """
    return logging.getLogger(f"vox_pulse.{name}")
