"""
Pruebas de las utilidades de formato, validación e identificadores.
"""
import re
from datetime import datetime, timedelta, timezone

import pytest

from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import AuthenticationRequiredError, ValidationError
from coursehub.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from coursehub.utils.formatting import (
    clamp, display_name, format_bytes, format_relative_date, generate_id, initials,
    is_valid_email, round_half_up, sanitize_filename, sanitize_folder_name, star_breakdown,
    validate_text_length,
)

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


def test_round_half_up_rounds_ties_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(4.25) == 4
    assert round_half_up(0.49) == 0


def test_clamp():
    assert clamp(120, 0, 100) == 100
    assert clamp(-5, 0, 100) == 0
    assert clamp(42.5, 0, 100) == 42.5


def test_names_and_initials():
    assert display_name("Sofia", "Ruiz") == "Sofia Ruiz"
    assert display_name("Sofia", "") == "Sofia"
    assert initials("sofia", "ruiz") == "SR"
    assert initials("", "") == ""


def test_email_pattern():
    assert is_valid_email("ana@mail.com")
    assert not is_valid_email("ana@mail")
    assert not is_valid_email("ana mail@x.com")
    assert not is_valid_email("")


def test_validate_text_length_strips_and_checks_bounds():
    assert validate_text_length("  hola  ", 3) == "hola"
    with pytest.raises(ValidationError):
        validate_text_length("  ab  ", 3)
    with pytest.raises(ValidationError):
        validate_text_length("x" * 11, 3, 10)
    with pytest.raises(ValidationError):
        validate_text_length(None, 1)


@pytest.mark.parametrize("days, expected", [
    (0, "Today"),
    (1, "Yesterday"),
    (3, "3 days ago"),
    (7, "1 week ago"),
    (14, "2 weeks ago"),
    (31, "1 month ago"),
    (90, "3 months ago"),
])
def test_format_relative_date(days, expected):
    assert format_relative_date(NOW - timedelta(days=days), now=NOW) == expected


def test_format_relative_date_old_dates_use_iso_format():
    moment = NOW - timedelta(days=400)
    assert format_relative_date(moment, now=NOW) == moment.date().isoformat()


def test_format_relative_date_accepts_naive_datetimes():
    assert format_relative_date(datetime(2026, 3, 30, 12, 0), now=NOW) == "Yesterday"


def test_format_bytes():
    assert format_bytes(0) == "0 Bytes"
    assert format_bytes(500) == "500 Bytes"
    assert format_bytes(1024) == "1 KB"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(100 * 1024 * 1024) == "100 MB"


def test_star_breakdown():
    assert star_breakdown(4.5) == {"full": 4, "half": 1, "empty": 0}
    assert star_breakdown(3.2) == {"full": 3, "half": 0, "empty": 2}
    assert star_breakdown(5) == {"full": 5, "half": 0, "empty": 0}
    assert star_breakdown(0) == {"full": 0, "half": 0, "empty": 5}


def test_sanitize_filename_removes_accents_and_unsafe_characters():
    assert sanitize_filename("Mi Vídeo (1).MP4") == "mi_video__1_.mp4"
    assert sanitize_filename("clase-01.mov") == "clase-01.mov"


def test_sanitize_folder_name():
    assert sanitize_folder_name("ana.lopez@mail.com") == "ana_lopez_at_mail_com"


def test_generate_id_format_and_uniqueness():
    ids = {generate_id("video") for _ in range(50)}
    assert len(ids) == 50
    for value in ids:
        assert re.match(r"^video_\d+_[0-9a-z]{9}$", value)


def test_session_context_derived_fields():
    ctx = SessionContext(email="ana@mail.com", first_name="ana", last_name="lopez", user_type="teacher")
    assert ctx.display_name == "ana lopez"
    assert ctx.initials == "AL"
    assert ctx.is_teacher and not ctx.is_student and not ctx.is_admin


def test_require_context_without_session():
    with pytest.raises(AuthenticationRequiredError):
        require_context(None)


def test_password_hash_is_salted_and_verifiable():
    first = get_password_hash("secret123")
    second = get_password_hash("secret123")
    assert first != "secret123"
    assert first != second
    assert verify_password("secret123", first)
    assert not verify_password("otra", first)
    assert not verify_password("secret123", "no-es-un-hash")


def test_access_token_round_trip():
    token = create_access_token(subject="ana@mail.com")
    assert decode_access_token(token) == "ana@mail.com"
    assert decode_access_token("token.invalido.x") is None
