from datetime import datetime, timedelta

import pytest
import pytz

from api.routes.auth import create_access_token

PASSWORD = "secret123"


def register(client, name: str, role: str = "student") -> dict:
    response = client.post(
        "/api/auth/register",
        json={
            "email": f"{name.lower()}@example.edu",
            "password": PASSWORD,
            "name": name,
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {"id": body["user"]["userId"], "email": body["user"]["email"], "token": body["token"]}


def auth(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


def due_in(days: int) -> str:
    return (datetime.now(pytz.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def prof(client):
    return register(client, "Prof", role="admin")


@pytest.fixture
def course_id(client, prof):
    response = client.post(
        "/api/courses",
        json={"name": "Intro to Computing", "code": "cs101", "semester": "Fall", "year": 2026},
        headers=auth(prof),
    )
    assert response.status_code == 201, response.text
    return response.json()["course"]["courseId"]


def enroll(client, prof: dict, course_id: str, user: dict) -> None:
    response = client.post(
        f"/api/courses/{course_id}/enroll",
        json={"studentEmail": user["email"]},
        headers=auth(prof),
    )
    assert response.status_code == 200, response.text


def test_health_and_root(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}
    assert client.get("/").json()["name"] == "CourseHub API"


def test_register_login_and_me(client) -> None:
    user = register(client, "Sam")

    response = client.post(
        "/api/auth/login", json={"email": "SAM@example.edu", "password": PASSWORD}
    )
    assert response.status_code == 200
    token = response.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["userId"] == user["id"]
    assert me.json()["role"] == "student"
    assert "passwordHash" not in me.json()


def test_register_duplicate_email_is_conflict(client) -> None:
    register(client, "Sam")

    response = client.post(
        "/api/auth/register",
        json={"email": "sam@example.edu", "password": PASSWORD, "name": "Sam", "role": "student"},
    )

    assert response.status_code == 409
    assert "error" in response.json()


def test_register_rejects_unknown_role_and_short_password(client) -> None:
    response = client.post(
        "/api/auth/register",
        json={"email": "x@example.edu", "password": PASSWORD, "name": "X", "role": "teacher"},
    )
    assert response.status_code == 422

    response = client.post(
        "/api/auth/register",
        json={"email": "x@example.edu", "password": "123", "name": "X", "role": "student"},
    )
    assert response.status_code == 422


def test_login_with_wrong_password(client) -> None:
    register(client, "Sam")

    response = client.post(
        "/api/auth/login", json={"email": "sam@example.edu", "password": "wrong-password"}
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_requests_without_valid_token_are_rejected(client) -> None:
    response = client.get("/api/courses")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}

    response = client.get("/api/courses", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid authentication credentials"}

    orphan = create_access_token({"sub": "deleted-user", "email": "gone@example.edu"})
    response = client.get("/api/courses", headers={"Authorization": f"Bearer {orphan}"})
    assert response.status_code == 401
    assert response.json() == {"error": "User not found"}


def test_student_cannot_create_course(client) -> None:
    student = register(client, "Sam")

    response = client.post(
        "/api/courses", json={"name": "Mine", "code": "X1"}, headers=auth(student)
    )

    assert response.status_code == 403
    assert response.json() == {"error": "Only professors can create courses"}


def test_unknown_course_is_not_found(client, prof) -> None:
    response = client.get("/api/courses/missing", headers=auth(prof))

    assert response.status_code == 404
    assert response.json() == {"error": "Course not found"}


def test_individual_submission_scenario(client, prof, course_id) -> None:
    student = register(client, "Sam")
    enroll(client, prof, course_id, student)

    course = client.get(f"/api/courses/{course_id}", headers=auth(student)).json()
    assert course["code"] == "CS101"
    assert course["studentCount"] == 1

    response = client.post(
        "/api/assignments",
        json={"title": "Essay", "courseId": course_id, "dueDate": due_in(5), "type": "individual"},
        headers=auth(prof),
    )
    assert response.status_code == 201, response.text
    assignment_id = response.json()["assignment"]["assignmentId"]

    response = client.post(
        "/api/submissions",
        json={"assignmentId": assignment_id, "status": "acknowledged", "submissionLink": "https://drive/x"},
        headers=auth(student),
    )
    assert response.status_code == 201, response.text
    submission = response.json()["submission"]
    assert submission["status"] == "acknowledged"
    assert submission["acknowledgedBy"]["userId"] == student["id"]
    assert submission["acknowledgedAt"] is not None

    response = client.post(
        "/api/submissions",
        json={"assignmentId": assignment_id, "status": "submitted"},
        headers=auth(student),
    )
    assert response.status_code == 200
    assert response.json()["submission"]["submissionId"] == submission["submissionId"]

    listed = client.get(f"/api/assignments/{assignment_id}/submissions", headers=auth(prof)).json()
    assert len(listed) == 1

    detail = client.get(f"/api/assignments/{assignment_id}", headers=auth(student)).json()
    assert detail["submissionCount"] == 1
    assert detail["isOverdue"] is False
    assert detail["userSubmission"]["submissionId"] == submission["submissionId"]

    response = client.put(
        f"/api/submissions/{submission['submissionId']}",
        json={"marks": 95, "feedback": "Great", "status": "graded"},
        headers=auth(prof),
    )
    assert response.status_code == 200
    assert response.json()["submission"]["marks"] == 95
    assert response.json()["submission"]["gradedBy"]["userId"] == prof["id"]

    response = client.post(
        "/api/submissions",
        json={"assignmentId": assignment_id, "status": "submitted"},
        headers=auth(student),
    )
    assert response.status_code == 400


def test_group_leader_scenario(client, prof, course_id) -> None:
    leader = register(client, "Lee")
    member = register(client, "Max")
    enroll(client, prof, course_id, leader)
    enroll(client, prof, course_id, member)

    response = client.post(
        "/api/groups", json={"name": "Team Rocket", "courseId": course_id}, headers=auth(leader)
    )
    assert response.status_code == 201, response.text
    group = response.json()["group"]
    assert group["leader"]["userId"] == leader["id"]
    assert group["memberCount"] == 1

    response = client.post(
        f"/api/groups/{group['groupId']}/members",
        json={"userEmail": member["email"]},
        headers=auth(leader),
    )
    assert response.status_code == 200
    assert response.json()["group"]["memberCount"] == 2

    response = client.post(
        f"/api/groups/{group['groupId']}/members",
        json={"userId": member["id"]},
        headers=auth(leader),
    )
    assert response.status_code == 409

    response = client.delete(
        f"/api/groups/{group['groupId']}/members/{leader['id']}", headers=auth(leader)
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot remove group leader"}

    response = client.post(
        "/api/assignments",
        json={"title": "Project", "courseId": course_id, "dueDate": due_in(10), "type": "group"},
        headers=auth(prof),
    )
    assignment_id = response.json()["assignment"]["assignmentId"]
    payload = {"assignmentId": assignment_id, "groupId": group["groupId"], "status": "acknowledged"}

    response = client.post("/api/submissions", json=payload, headers=auth(member))
    assert response.status_code == 403

    response = client.post("/api/submissions", json=payload, headers=auth(leader))
    assert response.status_code == 201
    assert response.json()["submission"]["group"]["groupId"] == group["groupId"]

    mine = client.get("/api/submissions/my-submissions", headers=auth(member)).json()
    assert [s["status"] for s in mine] == ["acknowledged"]

    my_groups = client.get("/api/groups/my-groups", headers=auth(member)).json()
    assert [g["groupId"] for g in my_groups] == [group["groupId"]]


def test_listing_filters_use_camel_case_query_params(client, prof, course_id) -> None:
    response = client.post(
        "/api/assignments",
        json={"title": "Essay", "courseId": course_id, "dueDate": due_in(5)},
        headers=auth(prof),
    )
    assert response.status_code == 201

    listed = client.get(
        "/api/assignments", params={"courseId": course_id}, headers=auth(prof)
    ).json()
    assert [a["title"] for a in listed] == ["Essay"]
    assert listed[0]["maxMarks"] == 100

    groups = client.get("/api/groups", params={"courseId": course_id}, headers=auth(prof))
    assert groups.status_code == 200
    assert groups.json() == []

    submissions = client.get(
        "/api/submissions", params={"courseId": course_id, "status": "graded"}, headers=auth(prof)
    )
    assert submissions.status_code == 200
    assert submissions.json() == []


def test_profile_and_user_directory(client, prof, course_id) -> None:
    student = register(client, "Sam")
    enroll(client, prof, course_id, student)

    response = client.put(
        "/api/users/me/profile", json={"name": "Samantha"}, headers=auth(student)
    )
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Samantha"

    profile = client.get("/api/users/me/profile", headers=auth(student)).json()
    assert [c["code"] for c in profile["enrolledCourses"]] == ["CS101"]
    assert profile["teachingCourses"] == []

    teacher = client.get(f"/api/users/{prof['id']}", headers=auth(student)).json()
    assert [c["code"] for c in teacher["teachingCourses"]] == ["CS101"]

    students = client.get("/api/users", params={"role": "student"}, headers=auth(prof)).json()
    assert [u["name"] for u in students] == ["Samantha"]

    roster = client.get(f"/api/users/course/{course_id}/students", headers=auth(prof)).json()
    assert [u["email"] for u in roster] == ["sam@example.edu"]


def test_analytics_endpoints(client, prof, course_id) -> None:
    student = register(client, "Sam")
    enroll(client, prof, course_id, student)

    overview = client.get("/api/analytics/overview", headers=auth(prof))
    assert overview.status_code == 200
    assert overview.json()["totalStudents"] == 1
    assert overview.json()["submissionRate"] == 0.0

    assert client.get("/api/analytics/overview", headers=auth(student)).status_code == 403

    course = client.get(f"/api/analytics/course/{course_id}", headers=auth(prof))
    assert course.status_code == 200
    assert course.json()["course"]["code"] == "CS101"

    dashboard = client.get("/api/analytics/student/dashboard", headers=auth(student))
    assert dashboard.status_code == 200
    assert dashboard.json()["totalCourses"] == 1


def test_delete_course(client, prof, course_id) -> None:
    response = client.delete(f"/api/courses/{course_id}", headers=auth(prof))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Course deleted successfully"}
    assert client.get(f"/api/courses/{course_id}", headers=auth(prof)).status_code == 404
