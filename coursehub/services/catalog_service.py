# coursehub/services/catalog_service.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import StoreError
from coursehub.crud import crud_course
from coursehub.models.course import Course
from coursehub.services.rating_service import RatingService, RatingSubject

logger = logging.getLogger("coursehub.catalog")

ALL_CATEGORIES = "all"


@dataclass
class CatalogEntry:
    course: Course
    video_count: int
    average_rating: float
    rating_count: int
    enrolled: bool = False


class CatalogService:
    """
    Búsqueda y recomendaciones sobre cursos publicados. Los errores del
    almacén se degradan a listas vacías.
    """

    def __init__(self, db: Session):
        self.db = db

    def _entry(self, course: Course, enrolled_ids) -> CatalogEntry:
        subject = RatingSubject.course(course.id)
        stats = RatingService.rating_stats(self.db, subject)
        return CatalogEntry(
            course=course,
            video_count=crud_course.count_videos(self.db, course.id),
            average_rating=stats.average,
            rating_count=stats.count,
            enrolled=course.id in enrolled_ids,
        )

    def _enrolled_ids(self, user_email: Optional[str]) -> set:
        if not user_email:
            return set()
        return set(crud_course.get_enrolled_course_ids(self.db, user_email))

    def search(self, query: str = "", category: str = ALL_CATEGORIES,
               user_email: Optional[str] = None) -> List[CatalogEntry]:
        """
        Coincidencia parcial, sin distinguir mayúsculas, en título, instructor,
        categoría y descripción. category filtra por igualdad exacta.
        """
        term = (query or "").strip()
        try:
            if term:
                courses = crud_course.search_courses(self.db, term, published_only=True)
            else:
                courses = crud_course.get_courses(self.db, published_only=True)
            if category and category != ALL_CATEGORIES:
                courses = [course for course in courses if course.category == category]
            enrolled_ids = self._enrolled_ids(user_email)
            return [self._entry(course, enrolled_ids) for course in courses]
        except StoreError as e:
            logger.warning(f"Búsqueda '{term}' degradada a vacío: {e.message}")
            return []

    def recommended(self, ctx: Optional[SessionContext]) -> List[CatalogEntry]:
        """Cursos publicados en los que el usuario no está inscrito y que no creó."""
        ctx = require_context(ctx)
        try:
            enrolled_ids = self._enrolled_ids(ctx.email)
            courses = [
                course for course in crud_course.get_courses(self.db, published_only=True)
                if course.id not in enrolled_ids and course.creator_email != ctx.email
            ]
            return [self._entry(course, enrolled_ids) for course in courses]
        except StoreError as e:
            logger.warning(f"Recomendaciones degradadas a vacío: {e.message}")
            return []

    def categories(self) -> List[str]:
        try:
            return crud_course.get_categories(self.db)
        except StoreError as e:
            logger.warning(f"No se pudieron leer las categorías: {e.message}")
            return []
