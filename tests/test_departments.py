from app.models.department import Department
from app.models.subject import Subject


def _department_id(db, code: str) -> int:
    return db.query(Department).filter(Department.code == code).one().id


def test_search_finds_department_by_code(client, student):
    r = client.get("/api/departments?search=CS&page=1&limit=10", headers=student)
    assert r.status_code == 200, r.text
    body = r.json()
    assert "CS" in [d["code"] for d in body["data"]]
    assert body["pagination"]["total"] >= 1


def test_search_is_case_insensitive_over_name_or_code(client, student):
    r = client.get("/api/departments?search=mathem", headers=student)
    assert [d["code"] for d in r.json()["data"]] == ["MATH"]

    r = client.get("/api/departments?search=eng", headers=student)
    assert [d["code"] for d in r.json()["data"]] == ["ENG"]


def test_list_keeps_departments_without_subjects(client, admin):
    r = client.get("/api/departments", headers=admin)
    counts = {d["code"]: d["totalSubjects"] for d in r.json()["data"]}
    assert counts == {"CS": 2, "MATH": 1, "ENG": 0}


def test_create_department(client, admin):
    r = client.post(
        "/api/departments",
        headers=admin,
        json={"code": "PHY", "name": "Physics", "description": "Matter and energy"},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["code"] == "PHY"
    assert data["description"] == "Matter and energy"
    assert "createdAt" in data and "updatedAt" in data


def test_duplicate_code_conflicts_even_with_other_fields_different(client, admin):
    r = client.post(
        "/api/departments",
        headers=admin,
        json={"code": "CS", "name": "Something else entirely"},
    )
    assert r.status_code == 409
    assert r.json()["error"] == "Department code already exists"


def test_code_match_is_case_sensitive(client, admin):
    r = client.post("/api/departments", headers=admin, json={"code": "cs", "name": "Lower"})
    assert r.status_code == 201


def test_create_reports_every_violation(client, admin):
    r = client.post(
        "/api/departments",
        headers=admin,
        json={"code": "   ", "unexpected": 1},
    )
    assert r.status_code == 400
    fields = {d["field"] for d in r.json()["details"]}
    assert {"code", "name", "unexpected"} <= fields


def test_get_department_with_totals(client, db, teacher):
    r = client.get(f"/api/departments/{_department_id(db, 'CS')}", headers=teacher)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["department"]["code"] == "CS"
    assert data["totals"] == {"subjects": 2, "classes": 2, "enrolledStudents": 1}


def test_get_missing_department(client, admin):
    r = client.get("/api/departments/9999", headers=admin)
    assert r.status_code == 404
    assert r.json() == {"error": "Department not found"}


def test_department_subjects_and_classes(client, db, student):
    cs = _department_id(db, "CS")

    r = client.get(f"/api/departments/{cs}/subjects", headers=student)
    assert sorted(s["code"] for s in r.json()["data"]) == ["CS101", "CS201"]

    r = client.get(f"/api/departments/{cs}/classes?limit=1", headers=student)
    body = r.json()
    assert body["pagination"]["total"] == 2
    assert body["pagination"]["totalPages"] == 2
    assert len(body["data"]) == 1
    assert body["data"][0]["subject"]["departmentId"] == cs
    assert body["data"][0]["teacher"]["id"] == "user_t1"


def test_department_users_by_role(client, db, student):
    cs = _department_id(db, "CS")

    r = client.get(f"/api/departments/{cs}/users?role=teacher", headers=student)
    body = r.json()
    # user_t1 teaches two CS classes but is listed once
    assert [u["id"] for u in body["data"]] == ["user_t1"]
    assert body["pagination"]["total"] == 1

    r = client.get(f"/api/departments/{cs}/users?role=student", headers=student)
    assert [u["id"] for u in r.json()["data"]] == ["user_s1"]


def test_department_users_requires_member_role(client, db, admin):
    cs = _department_id(db, "CS")
    r = client.get(f"/api/departments/{cs}/users?role=admin", headers=admin)
    assert r.status_code == 400


def test_update_is_partial(client, db, admin):
    cs = _department_id(db, "CS")
    r = client.put(f"/api/departments/{cs}", headers=admin, json={"name": "Computing"})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["name"] == "Computing"
    assert data["code"] == "CS"
    assert data["description"] == "Programming, systems and theory"


def test_update_can_clear_description(client, db, admin):
    cs = _department_id(db, "CS")
    r = client.put(f"/api/departments/{cs}", headers=admin, json={"description": None})
    assert r.status_code == 200
    assert r.json()["data"]["description"] is None


def test_update_without_fields_is_rejected(client, db, admin):
    cs = _department_id(db, "CS")
    r = client.put(f"/api/departments/{cs}", headers=admin, json={})
    assert r.status_code == 400

    r = client.put(f"/api/departments/{cs}", headers=admin, json={"nickname": "x"})
    assert r.status_code == 400


def test_update_rejects_null_for_required_column(client, db, admin):
    cs = _department_id(db, "CS")
    r = client.put(f"/api/departments/{cs}", headers=admin, json={"name": None})
    assert r.status_code == 400


def test_update_code_collision_excludes_self(client, db, admin):
    cs = _department_id(db, "CS")

    r = client.put(f"/api/departments/{cs}", headers=admin, json={"code": "CS"})
    assert r.status_code == 200

    r = client.put(f"/api/departments/{cs}", headers=admin, json={"code": "MATH"})
    assert r.status_code == 409


def test_delete_department_with_subjects_is_restricted(client, db, admin):
    cs = _department_id(db, "CS")
    r = client.delete(f"/api/departments/{cs}", headers=admin)
    assert r.status_code == 409

    db.expire_all()
    assert db.query(Subject).filter(Subject.department_id == cs).count() == 2


def test_delete_empty_department(client, db, admin):
    eng = _department_id(db, "ENG")
    r = client.delete(f"/api/departments/{eng}", headers=admin)
    assert r.status_code == 200
    assert r.json() == {"message": "Department deleted"}

    r = client.delete(f"/api/departments/{eng}", headers=admin)
    assert r.status_code == 404
