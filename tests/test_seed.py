import pytest
from pydantic import ValidationError

from app.core.config import settings
from app.db.seed import SeedData, SeedError, load_seed_data, seed
from app.models.department import Department
from app.models.enrollment import Enrollment
from app.models.school_class import SchoolClass
from app.models.subject import Subject


def test_seed_resolves_natural_keys(db):
    counts = seed(db, load_seed_data(settings.seed_data_path))
    assert counts == {
        "departments": 3,
        "subjects": 3,
        "users": 5,
        "classes": 3,
        "enrollments": 2,
    }

    cs = db.query(Department).filter(Department.code == "CS").one()
    cs101 = db.query(Subject).filter(Subject.code == "CS101").one()
    assert cs101.department_id == cs.id

    abc = db.query(SchoolClass).filter(SchoolClass.invite_code == "ABC123").one()
    assert abc.subject_id == cs101.id
    assert abc.teacher_id == "user_t1"
    assert abc.schedules[0] == {"day": "Monday", "startTime": "09:00", "endTime": "10:30"}

    dsa = db.query(SchoolClass).filter(SchoolClass.invite_code == "DSA777").one()
    enrollment = db.query(Enrollment).filter(Enrollment.student_id == "user_s1").one()
    assert enrollment.class_id == dsa.id


def test_seed_is_repeatable(db):
    data = load_seed_data(settings.seed_data_path)
    seed(db, data)
    seed(db, data)
    assert db.query(Department).count() == 3
    assert db.query(Enrollment).count() == 2


def test_seed_with_dangling_reference_changes_nothing(db):
    bad = SeedData.model_validate(
        {
            "departments": [{"code": "BIO", "name": "Biology"}],
            "subjects": [{"code": "BIO1", "name": "Cells", "departmentCode": "CHEM"}],
        }
    )
    with pytest.raises(SeedError):
        seed(db, bad)

    assert db.query(Department).count() == 3
    assert db.query(Department).filter(Department.code == "BIO").count() == 0


def test_seed_rejects_unknown_enrolled_student(db):
    data = load_seed_data(settings.seed_data_path)
    data.enrollments[0].student_id = "user_ghost"

    with pytest.raises(SeedError, match="user_ghost"):
        seed(db, data)

    assert db.query(Enrollment).count() == 2


def test_seed_emails_validate_like_the_api():
    with pytest.raises(ValidationError):
        SeedData.model_validate(
            {"users": [{"id": "u1", "name": "Reserved", "email": "someone@school.test"}]}
        )


def test_seeded_user_can_resubmit_own_email(client, admin):
    r = client.put("/api/users/user_t1", headers=admin, json={"email": "terry@example.com"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["email"] == "terry@example.com"
