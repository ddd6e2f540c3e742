# coursehub/core/metrics.py
# Contadores Prometheus expuestos en /metrics
from prometheus_client import Counter

PROGRESS_SAVES_TOTAL = Counter(
    "coursehub_progress_saves_total",
    "Guardados de progreso de video",
    ["outcome"],
)

RATINGS_SET_TOTAL = Counter(
    "coursehub_ratings_set_total",
    "Calificaciones registradas",
    ["subject_type"],
)

REVIEWS_SUBMITTED_TOTAL = Counter(
    "coursehub_reviews_submitted_total",
    "Reseñas publicadas",
)

COMMENTS_POSTED_TOTAL = Counter(
    "coursehub_comments_posted_total",
    "Comentarios publicados",
)
