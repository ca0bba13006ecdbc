from app.models.enrollment import Enrollment
from app.models.school_class import SchoolClass
from tests.conftest import auth_header


def _class_id(db, invite_code: str) -> int:
    return db.query(SchoolClass).filter(SchoolClass.invite_code == invite_code).one().id


def _enrollment(db, student_id: str, invite_code: str) -> Enrollment:
    return (
        db.query(Enrollment)
        .filter(
            Enrollment.student_id == student_id,
            Enrollment.class_id == _class_id(db, invite_code),
        )
        .one()
    )


def test_join_by_invite_code_then_again(client, db, student):
    r = client.post("/api/enrollments/join", headers=student, json={"inviteCode": "ABC123"})
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["classId"] == _class_id(db, "ABC123")
    assert data["studentId"] == "user_s1"
    assert data["class"]["inviteCode"] == "ABC123"
    assert data["student"]["email"] == "sam@example.com"

    r = client.post("/api/enrollments/join", headers=student, json={"inviteCode": "ABC123"})
    assert r.status_code == 409
    assert r.json()["error"] == "Student already enrolled in class"

    db.expire_all()
    assert db.query(Enrollment).filter(Enrollment.student_id == "user_s1").count() == 2


def test_create_by_class_id_uses_session_identity(client, db):
    r = client.post(
        "/api/enrollments",
        headers=auth_header("user_s2"),
        json={"classId": _class_id(db, "ABC123")},
    )
    assert r.status_code == 201, r.text
    assert r.json()["data"]["studentId"] == "user_s2"


def test_student_id_in_body_is_rejected(client, db, student):
    r = client.post(
        "/api/enrollments",
        headers=student,
        json={"classId": _class_id(db, "ABC123"), "studentId": "user_s2"},
    )
    assert r.status_code == 400


def test_duplicate_create_conflicts(client, db, student):
    r = client.post(
        "/api/enrollments", headers=student, json={"classId": _class_id(db, "DSA777")}
    )
    assert r.status_code == 409


def test_unknown_class_is_the_same_not_found_on_both_paths(client, student):
    by_id = client.post("/api/enrollments", headers=student, json={"classId": 9999})
    by_code = client.post("/api/enrollments/join", headers=student, json={"inviteCode": "ZZZ999"})
    assert by_id.status_code == by_code.status_code == 404
    assert by_id.json() == by_code.json() == {"error": "Class not found"}


def test_store_constraint_backs_up_the_precheck(client, db, student, monkeypatch):
    # a concurrent join that slipped past the existence check
    monkeypatch.setattr("app.routers.enrollments.find_enrollment", lambda *a, **kw: None)

    r = client.post("/api/enrollments/join", headers=student, json={"inviteCode": "DSA777"})
    assert r.status_code == 409
    assert r.json()["error"] == "Student already enrolled in class"

    db.expire_all()
    assert db.query(Enrollment).filter(Enrollment.student_id == "user_s1").count() == 1


def test_join_validates_body(client, student):
    r = client.post("/api/enrollments/join", headers=student, json={"inviteCode": "  "})
    assert r.status_code == 400


def test_teacher_can_list_and_filter(client, db, teacher):
    r = client.get("/api/enrollments", headers=teacher)
    assert r.json()["pagination"]["total"] == 2

    r = client.get(f"/api/enrollments?classId={_class_id(db, 'CALC01')}", headers=teacher)
    assert [e["studentId"] for e in r.json()["data"]] == ["user_s2"]

    r = client.get("/api/enrollments?studentId=user_s1", headers=teacher)
    data = r.json()["data"]
    assert len(data) == 1
    assert "enrolledAt" in data[0]


def test_get_enrollment_with_relations(client, db, teacher):
    enrollment_id = _enrollment(db, "user_s1", "DSA777").id
    r = client.get(f"/api/enrollments/{enrollment_id}", headers=teacher)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["class"]["name"] == "Data Structures"
    assert data["student"]["id"] == "user_s1"


def test_update_enrollment(client, db, admin):
    enrollment_id = _enrollment(db, "user_s2", "CALC01").id
    r = client.put(
        f"/api/enrollments/{enrollment_id}",
        headers=admin,
        json={"classId": _class_id(db, "ABC123")},
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["class"]["inviteCode"] == "ABC123"
    assert data["studentId"] == "user_s2"


def test_update_enrollment_into_existing_pair_conflicts(client, db, admin):
    enrollment_id = _enrollment(db, "user_s2", "CALC01").id
    r = client.put(
        f"/api/enrollments/{enrollment_id}",
        headers=admin,
        json={"classId": _class_id(db, "DSA777"), "studentId": "user_s1"},
    )
    assert r.status_code == 409


def test_update_enrollment_checks_references(client, db, admin):
    enrollment_id = _enrollment(db, "user_s2", "CALC01").id

    r = client.put(f"/api/enrollments/{enrollment_id}", headers=admin, json={"studentId": "ghost"})
    assert r.status_code == 404
    assert r.json()["error"] == "Student not found"

    r = client.put(f"/api/enrollments/{enrollment_id}", headers=admin, json={})
    assert r.status_code == 400


def test_delete_enrollment(client, db, teacher):
    enrollment_id = _enrollment(db, "user_s2", "CALC01").id
    r = client.delete(f"/api/enrollments/{enrollment_id}", headers=teacher)
    assert r.status_code == 200
    assert r.json() == {"message": "Enrollment deleted"}

    r = client.delete(f"/api/enrollments/{enrollment_id}", headers=teacher)
    assert r.status_code == 404
