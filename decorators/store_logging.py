# DECORADORES PARA LLAMADAS AL ALMACÉN DE DATOS
# Cada función CRUD traduce los errores de SQLAlchemy a la taxonomía de dominio
# y deja un registro estructurado de la operación.

import functools
import logging
import time
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from coursehub.core.exceptions import ConflictError, StoreError
from coursehub.core.logging_config import log_store_operation

logger = logging.getLogger("coursehub.store")


def store_operation(operation: str, table: str) -> Callable:
    """
    Envuelve una función CRUD cuyo primer argumento es la sesión.

    - IntegrityError -> ConflictError (llave única duplicada)
    - SQLAlchemyError -> StoreError
    En ambos casos se hace rollback de la sesión antes de propagar.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(db, *args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(db, *args, **kwargs)
            except IntegrityError as e:
                db.rollback()
                log_store_operation(
                    logger, operation, table, success=False,
                    error_code="unique_violation", function=func.__name__,
                )
                raise ConflictError(f"Registro duplicado en {table}") from e
            except SQLAlchemyError as e:
                db.rollback()
                log_store_operation(
                    logger, operation, table, success=False,
                    error_code=type(e).__name__, function=func.__name__,
                )
                raise StoreError(f"Error del almacén de datos en {table}: {e}") from e

            log_store_operation(
                logger, operation, table, success=True,
                function=func.__name__,
                response_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            return result
        return wrapper
    return decorator
