# MIDDLEWARE DE LOGGING DE PETICIONES
# Registra cada peticion con su request id, latencia y codigo de respuesta

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from coursehub.core.logging_config import log_api_request

logger = logging.getLogger("coursehub.api")


class RequestStats:
    def __init__(self):
        self.metrics = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'avg_response_time': 0.0,
        }

    def generate_request_id(self) -> str:
        return f'req_{uuid.uuid4().hex[:12]}'

    def record(self, status_code: int, response_time_ms: float) -> None:
        total = self.metrics['total_requests'] + 1
        self.metrics['total_requests'] = total
        if status_code >= 500:
            self.metrics['failed_requests'] += 1
        else:
            self.metrics['successful_requests'] += 1
        previous = self.metrics['avg_response_time']
        self.metrics['avg_response_time'] = previous + (response_time_ms - previous) / total

    def get_current_metrics(self) -> Dict[str, Any]:
        return {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'current_metrics': self.metrics.copy(),
        }


# Estadisticas compartidas del proceso, expuestas en /api/v1/health
request_stats = RequestStats()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, stats: RequestStats = None):
        super().__init__(app)
        self.stats = stats or request_stats

    async def dispatch(self, request: Request, call_next):
        request_id = self.stats.generate_request_id()
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f'Unhandled error en {request.method} {request.url.path}',
                             extra={'request_id': request_id})
            response = Response(
                content=json.dumps({'detail': 'Internal server error', 'request_id': request_id}),
                status_code=500,
                media_type='application/json'
            )

        response_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
        self.stats.record(response.status_code, response_time_ms)
        log_api_request(
            logger,
            request.method,
            request.url.path,
            status_code=response.status_code,
            response_time_ms=response_time_ms,
            user_email=getattr(request.state, 'user_email', None),
            request_id=request_id,
        )
        response.headers['X-Request-ID'] = request_id
        return response
