# coursehub/main.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from coursehub.api.v1.endpoints import (
    admin, auth, comments, courses, dashboards, health, progress, ratings, reviews
)
from coursehub.core.config import settings
from coursehub.core.exceptions import CourseHubError, StoreError
from coursehub.core.logging_config import setup_logging
from coursehub.db.base import Base
from coursehub.db.models_registry import *  # noqa: F401,F403 registra las tablas
from coursehub.db.session import engine
from middleware.request_logging import RequestLoggingMiddleware

# Configurar logging al inicio de la aplicacion
setup_logging()
logger = logging.getLogger('coursehub')


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info('Tablas verificadas')
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description='''
    ## Backend API de CourseHub

    **Servicios Disponibles:**
    - **Authentication**: Registro, login JWT y perfil
    - **Courses**: Catálogo, búsqueda, creación de cursos y videos, inscripciones
    - **Progress**: Seguimiento de la posición de reproducción por video
    - **Ratings & Reviews**: Calificaciones, reseñas, votos de utilidad y respuestas
    - **Comments**: Hilos de comentarios por curso
    - **Dashboards**: Tableros de estudiante, profesor y administrador
    - **Admin**: Gestión de usuarios
    ''',
    version='1.0.0',
    lifespan=lifespan,
    openapi_url='/openapi.json',
    docs_url='/docs',
    redoc_url='/redoc'
)

logger.info('CourseHub API starting up')

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(CourseHubError)
async def coursehub_error_handler(request: Request, exc: CourseHubError):
    """
    Traduce la taxonomía de errores de dominio a respuestas HTTP.
    """
    if isinstance(exc, StoreError):
        logger.error(f'Error del almacén en {request.method} {request.url.path}: {exc.message}')
    return JSONResponse(
        status_code=exc.status_code,
        content={'detail': exc.message, 'error': type(exc).__name__},
    )


# Incluir rutas
app.include_router(health.router, prefix='/api/v1', tags=['Health Check'])
app.include_router(auth.router, prefix='/api/v1', tags=['Authentication'])
app.include_router(courses.router, prefix='/api/v1/courses', tags=['Courses'])
app.include_router(ratings.router, prefix='/api/v1/courses', tags=['Ratings'])
app.include_router(reviews.router, prefix='/api/v1', tags=['Reviews'])
app.include_router(comments.router, prefix='/api/v1', tags=['Comments'])
app.include_router(progress.router, prefix='/api/v1/progress', tags=['Progress'])
app.include_router(dashboards.router, prefix='/api/v1/dashboard', tags=['Dashboards'])
app.include_router(admin.router, prefix='/api/v1/admin', tags=['Admin'])

# Archivos públicos del almacén de objetos
app.mount(
    '/storage/v1/object/public',
    StaticFiles(directory=os.path.abspath(settings.STORAGE_ROOT), check_dir=False),
    name='storage',
)


@app.get('/')
async def root():
    return {
        'message': 'Bienvenido al Backend de CourseHub',
        'status': 'operativo',
        'version': '1.0.0',
        'docs': '/docs',
        'available_services': [
            'health', 'auth', 'courses', 'progress', 'ratings', 'reviews', 'comments',
            'dashboard', 'admin'
        ],
    }


@app.get('/metrics', include_in_schema=False)
async def prometheus_metrics():
    """Endpoint de metricas para Prometheus"""
    return Response(
        generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
