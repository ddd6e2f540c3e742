import logging
import logging.config
import json
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from coursehub.core.config import settings


class StructuredFormatter(logging.Formatter):
    """
    Formatter que genera logs en formato JSON estructurado
    para facilitar la integración con sistemas de monitoreo
    """

    EXTRA_FIELDS = (
        "service", "endpoint", "method", "status_code", "response_time_ms",
        "user_email", "course_id", "video_id", "operation", "table",
        "success", "request_id", "error_code",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def build_logging_config(log_dir: Path, level: str = "INFO") -> Dict[str, Any]:
    """
    Construye el diccionario de configuración para dictConfig
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": level,
                "stream": "ext://sys.stdout"
            },
            "file_all": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "structured",
                "filename": str(log_dir / "app.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 10,
                "level": level
            },
            "file_errors": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "structured",
                "filename": str(log_dir / "errors.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 10,
                "level": "ERROR"
            },
            "file_progress": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "structured",
                "filename": str(log_dir / "progress.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "level": level
            }
        },
        "loggers": {
            "coursehub": {
                "level": level,
                "handlers": ["console", "file_all", "file_errors"],
                "propagate": False
            },
            "coursehub.progress": {
                "level": level,
                "handlers": ["console", "file_progress", "file_errors"],
                "propagate": False
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console", "file_all"],
                "propagate": False
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["file_all"],
                "propagate": False
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "file_all"]
        }
    }


def setup_logging(log_dir: Optional[str] = None) -> None:
    """
    Configura el sistema de logging con rotación y formato estructurado
    """
    path = Path(log_dir or settings.LOG_DIR)
    path.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(path, settings.LOG_LEVEL))

    logger = logging.getLogger("coursehub")
    logger.info("Logging system initialized successfully")
    logger.info(f"Log files will be stored in: {path.absolute()}")


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter personalizado para agregar contexto adicional a los logs
    """

    def __init__(self, logger: logging.Logger, extra: Dict[str, Any] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if self.extra:
            kwargs.setdefault('extra', {}).update(self.extra)
        return msg, kwargs


def get_service_logger(name: str, service: str) -> LoggerAdapter:
    """
    Obtiene un logger con el nombre del servicio como contexto fijo
    """
    return LoggerAdapter(logging.getLogger(name), {"service": service})


def log_api_request(logger: logging.Logger, method: str, endpoint: str,
                    status_code: int = None, response_time_ms: int = None,
                    user_email: str = None, **kwargs):
    """
    Registra información de una petición API con contexto estructurado

    Args:
        logger: Logger a usar
        method: Método HTTP
        endpoint: Endpoint accedido
        status_code: Código de respuesta HTTP
        response_time_ms: Tiempo de respuesta en millisegundos
        user_email: Email del usuario (si está autenticado)
        **kwargs: Información adicional
    """
    extra = {
        "method": method,
        "endpoint": endpoint,
        "service": "api"
    }

    if status_code:
        extra["status_code"] = status_code
    if response_time_ms is not None:
        extra["response_time_ms"] = response_time_ms
    if user_email:
        extra["user_email"] = user_email

    extra.update(kwargs)

    if status_code and status_code >= 500:
        logger.error(f"API request failed: {method} {endpoint}", extra=extra)
    elif status_code and status_code >= 400:
        logger.warning(f"API request rejected: {method} {endpoint}", extra=extra)
    else:
        logger.info(f"API request: {method} {endpoint}", extra=extra)


def log_store_operation(logger: logging.Logger, operation: str, table: str,
                        success: bool = True, **kwargs):
    """
    Registra una operación contra el almacén de datos

    Args:
        logger: Logger a usar
        operation: Tipo de operación (select, upsert, insert, delete)
        table: Tabla afectada
        success: Si la operación fue exitosa
        **kwargs: Información adicional
    """
    extra = {
        "operation": operation,
        "table": table,
        "service": "store",
        "success": success
    }
    extra.update(kwargs)

    if success:
        logger.debug(f"Store operation successful: {operation} {table}", extra=extra)
    else:
        logger.error(f"Store operation failed: {operation} {table}", extra=extra)
