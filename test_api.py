"""
Pruebas de la API HTTP con TestClient.
"""

from conftest import TEST_PASSWORD, auth_headers
from coursehub.crud import crud_course
from coursehub.services.progress_tracker import ProgressTracker
from coursehub.services.storage_service import StorageService

API = "/api/v1"


# ── Servicio ──

def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "operativo"


def test_health(client):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["services"]["database"]["status"] == "ok"
    assert body["requests"]["total_requests"] >= 0


def test_request_id_header(client):
    response = client.get(f"{API}/health")
    assert response.headers["X-Request-ID"].startswith("req_")


def test_metrics_endpoint(client, student, course):
    client.post(
        f"{API}/progress/heartbeat",
        json={"course_id": course.id, "video_id": "video_a", "event": "pause",
              "current_time": 10, "duration": 100, "paused": True},
        headers=auth_headers(student.email),
    )
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "coursehub_progress_saves_total" in response.text


def test_public_storage_files_are_served(client):
    storage = StorageService()
    storage.upload("api-test/ping.mp4", b"ping")
    try:
        response = client.get("/storage/v1/object/public/course-videos/api-test/ping.mp4")
        assert response.status_code == 200
        assert response.content == b"ping"
    finally:
        storage.remove("api-test/ping.mp4")


# ── Autenticación ──

def test_register_login_and_me(client):
    response = client.post(f"{API}/auth/register", json={
        "first_name": "Lucia", "last_name": "Diaz", "email": "lucia@example.com",
        "password": "clave", "user_type": "teacher",
    })
    assert response.status_code == 201
    assert "hashed_password" not in response.json()

    response = client.post(f"{API}/auth/token", data={"username": "lucia@example.com", "password": "clave"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user_type"] == "teacher"


def test_register_rejects_admin_and_duplicates(client, student):
    response = client.post(f"{API}/auth/register", json={
        "first_name": "Eva", "last_name": "Sol", "email": "eva@example.com",
        "password": "clave", "user_type": "admin",
    })
    assert response.status_code == 422

    response = client.post(f"{API}/auth/register", json={
        "first_name": "Sofia", "last_name": "Ruiz", "email": student.email, "password": "clave",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"


def test_login_errors(client, student, admin):
    response = client.post(f"{API}/auth/token", data={"username": student.email, "password": "mala"})
    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationRequiredError"

    client.put(f"{API}/admin/users/{student.email}/status", json={"status": "suspended"},
               headers=auth_headers(admin.email))
    response = client.post(f"{API}/auth/token", data={"username": student.email, "password": TEST_PASSWORD})
    assert response.status_code == 403


def test_protected_endpoints_require_token(client, course):
    assert client.get(f"{API}/auth/me").status_code == 401
    assert client.get(f"{API}/auth/me", headers={"Authorization": "Bearer no-valido"}).status_code == 401
    assert client.post(f"{API}/courses/{course.id}/enroll").status_code == 401


def test_suspended_token_is_rejected(client, db, student, admin_ctx):
    from coursehub.services.user_service import UserService

    UserService.suspend_user(db, admin_ctx, student.email)
    response = client.get(f"{API}/auth/me", headers=auth_headers(student.email))
    assert response.status_code == 403


def test_update_profile_and_password(client, student):
    headers = auth_headers(student.email)
    response = client.put(f"{API}/auth/me", json={"bio": "Hola"}, headers=headers)
    assert response.json()["bio"] == "Hola"

    response = client.post(f"{API}/auth/me/password",
                           json={"current_password": "mala", "new_password": "nueva"}, headers=headers)
    assert response.status_code == 400
    response = client.post(f"{API}/auth/me/password",
                           json={"current_password": TEST_PASSWORD, "new_password": "nueva"}, headers=headers)
    assert response.status_code == 200


# ── Cursos ──

def test_catalog_is_public(client, course):
    response = client.get(f"{API}/courses/", params={"q": "python"})
    assert response.status_code == 200
    entries = response.json()
    assert [e["course"]["title"] for e in entries] == ["Python desde Cero"]
    assert entries[0]["video_count"] == 2
    assert entries[0]["enrolled"] is False
    assert client.get(f"{API}/courses/categories").json() == ["Programming"]


def test_catalog_marks_enrollment_for_signed_in_users(client, db, course, student):
    crud_course.create_enrollment(db, student.email, course.id)
    entries = client.get(f"{API}/courses/", headers=auth_headers(student.email)).json()
    assert entries[0]["enrolled"] is True


def test_course_lifecycle(client, teacher, student, storage):
    teacher_headers = auth_headers(teacher.email)

    assert client.post(f"{API}/courses/", json={"title": "X"},
                       headers=auth_headers(student.email)).status_code == 403

    response = client.post(f"{API}/courses/", json={"title": "Git práctico", "category": "Tools"},
                           headers=teacher_headers)
    assert response.status_code == 201
    course_id = response.json()["id"]
    assert response.json()["videos"] == []

    response = client.post(
        f"{API}/courses/{course_id}/videos",
        files={"file": ("Clase 1.mp4", b"\x00\x01\x02", "video/mp4")},
        data={"duration": "42.4", "name": "Ramas"},
        headers=teacher_headers,
    )
    assert response.status_code == 201
    video = response.json()
    assert video["duration_seconds"] == 42
    assert video["size_label"] == "3 Bytes"
    assert video["video_url"].startswith("http://testserver/storage/v1/object/public/course-videos/")
    assert storage.read(storage.path_from_public_url(video["video_url"])) == b"\x00\x01\x02"

    response = client.post(
        f"{API}/courses/{course_id}/videos",
        files={"file": ("notas.pdf", b"%PDF", "application/pdf")},
        data={"duration": "10"},
        headers=teacher_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

    detail = client.get(f"{API}/courses/{course_id}").json()
    assert [v["name"] for v in detail["videos"]] == ["Ramas"]

    response = client.put(f"{API}/courses/{course_id}", json={"description": "Flujo con ramas"},
                          headers=teacher_headers)
    assert response.json()["description"] == "Flujo con ramas"

    assert [c["id"] for c in client.get(f"{API}/courses/created", headers=teacher_headers).json()] == [course_id]

    response = client.delete(f"{API}/courses/{course_id}", headers=teacher_headers)
    assert response.status_code == 200
    assert client.get(f"{API}/courses/{course_id}").status_code == 404


def test_course_not_found_body(client):
    response = client.get(f"{API}/courses/9999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Curso no encontrado", "error": "NotFoundError"}


def test_enrollment_flow(client, course, student, teacher):
    headers = auth_headers(student.email)
    response = client.post(f"{API}/courses/{course.id}/enroll", headers=headers)
    assert response.json() == {"course_id": course.id, "enrolled": True, "already_enrolled": False}
    response = client.post(f"{API}/courses/{course.id}/enroll", headers=headers)
    assert response.json()["already_enrolled"] is True

    assert client.get(f"{API}/courses/{course.id}/enrollment", headers=headers).json()["enrolled"] is True
    assert [c["id"] for c in client.get(f"{API}/courses/enrolled", headers=headers).json()] == [course.id]

    response = client.post(f"{API}/courses/{course.id}/enroll", headers=auth_headers(teacher.email))
    assert response.status_code == 403

    client.delete(f"{API}/courses/{course.id}/enroll", headers=headers)
    assert client.get(f"{API}/courses/{course.id}/enrollment", headers=headers).json()["enrolled"] is False


# ── Progreso ──

def test_heartbeat_and_course_progress(client, course, student):
    headers = auth_headers(student.email)

    def heartbeat(**fields):
        body = {"course_id": course.id, "video_id": "video_a", "duration": 100}
        body.update(fields)
        return client.post(f"{API}/progress/heartbeat", json=body, headers=headers).json()

    assert heartbeat(event="tick", current_time=20, paused=True) == {"saved": False, "record": None}

    result = heartbeat(event="pause", current_time=60, paused=True)
    assert result["saved"] is True
    assert result["record"]["percentage"] == 60

    progress = client.get(f"{API}/progress/{course.id}", headers=headers).json()
    assert progress["progress"] == 30
    assert progress["review_eligible"] is False
    assert [v["video_id"] for v in progress["videos"]] == ["video_a", "video_b"]

    heartbeat(video_id="video_b", duration=200, event="seek", current_time=100)
    progress = client.get(f"{API}/progress/{course.id}", headers=headers).json()
    assert progress["progress"] == 55
    assert progress["review_eligible"] is True

    resume = client.get(f"{API}/progress/{course.id}/video_a/resume", headers=headers).json()
    assert resume["time_position"] == 60

    result = heartbeat(event="ended", current_time=98)
    assert result["record"]["time_position"] == 100
    assert result["record"]["is_complete"] is True


def test_video_progress_without_record(client, course, student):
    record = client.get(f"{API}/progress/{course.id}/video_b", headers=auth_headers(student.email)).json()
    assert record["percentage"] == 0
    assert record["time_position"] == 0


def test_heartbeat_rejects_unknown_event(client, course, student):
    response = client.post(f"{API}/progress/heartbeat", json={
        "course_id": course.id, "video_id": "video_a", "event": "rewind",
    }, headers=auth_headers(student.email))
    assert response.status_code == 422


# ── Calificaciones, reseñas y comentarios ──

def test_rating_review_and_reply_flow(client, db, course, student, student2, teacher):
    student_headers = auth_headers(student.email)
    crud_course.create_enrollment(db, student.email, course.id)

    response = client.put(f"{API}/courses/{course.id}/rating", json={"value": 4},
                          headers=auth_headers(student2.email))
    assert response.status_code == 403
    assert response.json()["error"] == "EligibilityError"

    assert client.put(f"{API}/courses/{course.id}/rating", json={"value": 7},
                      headers=student_headers).status_code == 400
    response = client.put(f"{API}/courses/{course.id}/rating", json={"value": 4}, headers=student_headers)
    assert response.json() == {"value": 4, "can_rate": True}

    eligibility = client.get(f"{API}/courses/{course.id}/reviews/eligibility", headers=student_headers).json()
    assert eligibility == {"can_write_review": False, "has_rating": True}

    tracker = ProgressTracker(db)
    tracker.record_tick(student.email, course.id, "video_a", 100, 100)
    response = client.post(f"{API}/courses/{course.id}/reviews",
                           json={"content": "Muy claro y práctico, lo recomiendo"}, headers=student_headers)
    assert response.status_code == 201
    review = response.json()
    assert review["rating"] == 4

    response = client.post(f"{API}/reviews/{review['review_id']}/helpful", json={"vote": "up"},
                           headers=auth_headers(student2.email))
    assert response.json() == {"review_id": review["review_id"], "helpful_up": 1,
                               "helpful_down": 0, "user_vote": "up"}

    response = client.post(f"{API}/reviews/{review['review_id']}/replies",
                           json={"content": "Gracias por comentar"}, headers=auth_headers(teacher.email))
    assert response.status_code == 201

    reviews = client.get(f"{API}/courses/{course.id}/reviews", params={"star": 4}).json()
    assert [r["replies"][0]["content"] for r in reviews] == ["Gracias por comentar"]
    assert client.get(f"{API}/courses/{course.id}/reviews", params={"star": 9}).status_code == 422

    stats = client.get(f"{API}/courses/{course.id}/reviews/stats").json()
    assert stats["total"] == 1
    assert stats["distribution"]["percentages"]["4"] == 100

    rating_stats = client.get(f"{API}/courses/{course.id}/rating/stats").json()
    assert rating_stats["average"] == 4
    assert rating_stats["count"] == 1
    assert rating_stats["stars"] == {"full": 4, "half": 0, "empty": 1}

    response = client.put(f"{API}/reviews/{review['review_id']}", json={"content": "Editada pero igual de buena"},
                          headers=student_headers)
    assert response.json()["edited"] is True
    assert client.delete(f"{API}/reviews/{review['review_id']}",
                         headers=auth_headers(teacher.email)).status_code == 403
    assert client.delete(f"{API}/reviews/{review['review_id']}", headers=student_headers).status_code == 200


def test_review_without_rating_is_rejected(client, db, course, teacher2):
    response = client.post(f"{API}/courses/{course.id}/reviews",
                           json={"content": "Reseña sin calificación previa"}, headers=auth_headers(teacher2.email))
    assert response.status_code == 403
    assert response.json()["error"] == "MissingRatingError"


def test_comment_flow(client, course, student, student2):
    headers = auth_headers(student.email)
    response = client.post(f"{API}/courses/{course.id}/comments", json={"content": "¿Hay ejercicios?"},
                           headers=headers)
    assert response.status_code == 201
    comment_id = response.json()["comment_id"]

    assert client.post(f"{API}/courses/{course.id}/comments", json={"content": "ok"},
                       headers=headers).status_code == 400

    response = client.post(f"{API}/comments/{comment_id}/like", headers=auth_headers(student2.email))
    assert response.json() == {"comment_id": comment_id, "liked": True, "likes": 1}

    response = client.post(f"{API}/comments/{comment_id}/replies", json={"content": "Sí, al final"},
                           headers=auth_headers(student2.email))
    assert response.status_code == 201

    comments = client.get(f"{API}/courses/{course.id}/comments", params={"sort": "popular"}).json()
    assert comments[0]["likes"] == 1
    assert comments[0]["created_label"] == "Today"
    assert comments[0]["replies"][0]["content"] == "Sí, al final"

    assert client.put(f"{API}/comments/{comment_id}", json={"content": "Ajeno"},
                      headers=auth_headers(student2.email)).status_code == 403
    assert client.delete(f"{API}/comments/{comment_id}", headers=headers).status_code == 200
    assert client.get(f"{API}/courses/{course.id}/comments").json() == []


# ── Tableros y administración ──

def test_dashboards_by_role(client, course, student, teacher, admin):
    assert client.get(f"{API}/dashboard/student", headers=auth_headers(student.email)).status_code == 200
    assert client.get(f"{API}/dashboard/teacher", headers=auth_headers(student.email)).status_code == 403

    teacher_dashboard = client.get(f"{API}/dashboard/teacher", headers=auth_headers(teacher.email)).json()
    assert teacher_dashboard["total_courses"] == 1
    assert teacher_dashboard["total_videos"] == 2

    admin_dashboard = client.get(f"{API}/dashboard/admin", headers=auth_headers(admin.email)).json()
    assert admin_dashboard["total_users"] == 3


def test_admin_user_management(client, student, teacher, admin):
    headers = auth_headers(admin.email)
    users = client.get(f"{API}/admin/users", params={"user_type": "student"}, headers=headers).json()
    assert [u["email"] for u in users] == [student.email]

    assert client.get(f"{API}/admin/users", headers=auth_headers(teacher.email)).status_code == 403

    response = client.put(f"{API}/admin/users/{admin.email}/status", json={"status": "suspended"},
                          headers=headers)
    assert response.status_code == 403

    assert client.delete(f"{API}/admin/users/{student.email}", headers=headers).status_code == 200
    assert client.get(f"{API}/admin/users", params={"user_type": "student"}, headers=headers).json() == []
