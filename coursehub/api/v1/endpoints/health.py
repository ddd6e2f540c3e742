# coursehub/api/v1/endpoints/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.db.session import get_db
from middleware.request_logging import request_stats

router = APIRouter()


@router.get("/health", summary="Verifica el estado del servicio")
def check_health(db: Session = Depends(get_db)):
    """
    Verifica que la API está activa y que la base de datos responde.
    """
    health_status = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "database": {"status": "unknown"},
        },
        "requests": request_stats.get_current_metrics()["current_metrics"],
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = {"status": "ok"}
    except SQLAlchemyError as e:
        health_status["status"] = "degraded"
        health_status["services"]["database"] = {"status": "error", "message": str(e)}

    return health_status
