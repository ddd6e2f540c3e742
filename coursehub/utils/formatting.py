# coursehub/utils/formatting.py
"""
Utilidades de formato y validación compartidas por los servicios.
"""
import math
import random
import re
import string
import time
import unicodedata
from datetime import datetime, timezone
from typing import Dict, Optional

from coursehub.core.exceptions import ValidationError

_BASE36 = string.digits + string.ascii_lowercase
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """
    Redondeo al entero más cercano con empates hacia arriba (2.5 -> 3).
    round() de Python usa redondeo bancario, que no es lo que se muestra.
    """
    return int(math.floor(value + 0.5))


def display_name(first_name: str, last_name: str) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def initials(first_name: str, last_name: str) -> str:
    return ((first_name or "")[:1] + (last_name or "")[:1]).upper()


def is_valid_email(email: str) -> bool:
    return bool(email and EMAIL_PATTERN.match(email))


def validate_text_length(text: Optional[str], minimum: int, maximum: Optional[int] = None,
                         label: str = "El texto") -> str:
    """
    Recorta espacios y valida la longitud. Devuelve el texto limpio.

    Raises:
        ValidationError: Si la longitud queda fuera de [minimum, maximum]
    """
    content = (text or "").strip()
    if len(content) < minimum:
        raise ValidationError(f"{label} debe tener al menos {minimum} caracteres")
    if maximum is not None and len(content) > maximum:
        raise ValidationError(f"{label} no puede exceder {maximum} caracteres")
    return content


def format_relative_date(moment: datetime, now: Optional[datetime] = None) -> str:
    """
    Fecha relativa para listados: 'Today', 'Yesterday', 'N days ago',
    semanas y meses; fechas más antiguas en formato ISO.
    """
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    days = (now - moment).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks > 1 else ''} ago"
    if days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''} ago"
    return moment.date().isoformat()


def format_bytes(size: int) -> str:
    if not size:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {units[exponent]}"


def star_breakdown(rating: float) -> Dict[str, int]:
    """
    Cantidad de estrellas llenas, medias y vacías (de 5) para un promedio.
    """
    rating = clamp(rating or 0.0, 0.0, 5.0)
    full = int(math.floor(rating))
    half = 1 if full < 5 and rating - full >= 0.5 else 0
    return {"full": full, "half": half, "empty": 5 - full - half}


def sanitize_filename(filename: str) -> str:
    """
    Quita acentos y reemplaza todo lo que no sea [a-zA-Z0-9.-] por '_'.
    """
    normalized = unicodedata.normalize("NFD", filename)
    without_marks = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return _UNSAFE_FILENAME_CHARS.sub("_", without_marks).lower()


def sanitize_folder_name(email: str) -> str:
    return email.replace("@", "_at_").replace(".", "_")


def generate_id(prefix: str) -> str:
    """
    Identificador opaco '<prefix>_<epoch ms>_<9 caracteres base36>'.
    """
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"
