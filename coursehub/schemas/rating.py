from typing import Dict, Optional

from pydantic import BaseModel, computed_field

from coursehub.utils.formatting import star_breakdown


class RatingSet(BaseModel):
    value: float
    video_id: Optional[str] = None


class RatingDistribution(BaseModel):
    total: int
    counts: Dict[int, int]
    percentages: Dict[int, float]

    class Config:
        from_attributes = True


class RatingStats(BaseModel):
    average: float
    count: int
    distribution: RatingDistribution

    @computed_field
    @property
    def stars(self) -> Dict[str, int]:
        """Estrellas llenas, medias y vacías para pintar el promedio."""
        return star_breakdown(self.average)

    class Config:
        from_attributes = True


class UserRating(BaseModel):
    value: float
    can_rate: bool
