"""
Каталог: предметы, классы, курсы, вопросы.
"""

import pytest

from app.models.course import UserSubject

pytestmark = pytest.mark.unit


@pytest.fixture
def user_headers(make_user, auth_headers):
    user = make_user(phone="+22670000001")
    return auth_headers(user.id, user.phone, "user")


def _create_subject(client, headers, name="Mathématiques"):
    response = client.post("/api/admin/subjects", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()["subject"]


def test_subjects_public_list_and_admin_create(client, admin_headers):
    assert client.get("/api/subjects").json() == {"subjects": []}

    subject = _create_subject(client, admin_headers)

    assert client.get("/api/subjects").json()["subjects"][0]["id"] == subject["id"]
    assert client.get("/api/admin/subjects", headers=admin_headers).json()["subjects"][0]["name"] == "Mathématiques"


def test_subject_name_required(client, admin_headers):
    response = client.post("/api/admin/subjects", json={"name": "  "}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Subject name is required"}


def test_user_cannot_create_subject(client, user_headers):
    response = client.post("/api/admin/subjects", json={"name": "SVT"}, headers=user_headers)
    assert response.status_code == 403


def test_questions_crud(client, admin_headers, user_headers):
    subject = _create_subject(client, admin_headers)
    url = f"/api/admin/subjects/{subject['id']}/questions"

    response = client.post(url, json={"question": "2+2 ?"}, headers=admin_headers)
    assert response.status_code == 400

    response = client.post(
        url,
        json={"question": "2+2 ?", "answer": "4", "options": ["3", "4", "5"]},
        headers=admin_headers,
    )
    assert response.status_code == 201
    question = response.json()["question"]
    assert question["options"] == ["3", "4", "5"]

    listed = client.get(f"/api/subjects/{subject['id']}/questions", headers=user_headers).json()["questions"]
    assert [q["id"] for q in listed] == [question["id"]]
    assert client.get(url, headers=admin_headers).json()["questions"][0]["answer"] == "4"

    response = client.put(f"/api/admin/questions/{question['id']}", json={"answer": "four"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["question"]["answer"] == "four"
    assert response.json()["question"]["question"] == "2+2 ?"

    assert client.delete(f"/api/admin/questions/{question['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/admin/questions/{question['id']}", headers=admin_headers).status_code == 404


def test_questions_require_token(client, admin_headers):
    subject = _create_subject(client, admin_headers)
    assert client.get(f"/api/subjects/{subject['id']}/questions").status_code == 401


def test_questions_of_unknown_subject(client, admin_headers):
    response = client.post(
        "/api/admin/subjects/999/questions", json={"question": "q", "answer": "a"}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Subject not found"}


def test_classes_and_courses(client, admin_headers, user_headers):
    subject = _create_subject(client, admin_headers)

    response = client.post(f"/api/admin/subjects/{subject['id']}/classes", json={"name": "CM2"}, headers=admin_headers)
    assert response.status_code == 201
    school_class = response.json()["class"]

    classes = client.get(f"/api/subjects/{subject['id']}/classes", headers=user_headers).json()["classes"]
    assert [c["name"] for c in classes] == ["CM2"]

    courses_url = f"/api/admin/classes/{school_class['id']}/courses"
    assert client.post(courses_url, json={"title": "Fractions"}, headers=admin_headers).status_code == 400

    response = client.post(courses_url, json={"title": "Fractions", "content": "..."}, headers=admin_headers)
    assert response.status_code == 201
    course = response.json()["course"]

    listed = client.get(f"/api/classes/{school_class['id']}/courses", headers=user_headers).json()["courses"]
    assert [c["id"] for c in listed] == [course["id"]]

    response = client.put(f"{courses_url}/{course['id']}", json={"content": "Les fractions"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["course"]["title"] == "Fractions"

    fetched = client.get(f"/api/courses/{course['id']}", headers=user_headers).json()["course"]
    assert fetched["content"] == "Les fractions"

    # Курс из другого класса не найден
    assert client.put(f"/api/admin/classes/999/courses/{course['id']}", json={"title": "x"}, headers=admin_headers).status_code == 404

    assert client.delete(f"{courses_url}/{course['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/courses/{course['id']}", headers=user_headers).status_code == 404


def test_my_subjects(client, admin_headers, make_user, auth_headers, session_factory):
    user = make_user(phone="+22670000003")
    math = _create_subject(client, admin_headers, "Maths")
    _create_subject(client, admin_headers, "Histoire")

    with session_factory() as session:
        session.add(UserSubject(user_id=user.id, subject_id=math["id"]))
        session.commit()

    subjects = client.get("/api/my-subjects", headers=auth_headers(user.id, user.phone)).json()["subjects"]
    assert [s["name"] for s in subjects] == ["Maths"]
