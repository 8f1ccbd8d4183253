"""
Configuration partagée pour tous les tests.

- client : override get_db (MagicMock) et get_current_teacher → aucune connexion à PostgreSQL
- db_session : base SQLite en mémoire, SAVEPOINT fonctionnels, pour les tests de service
- school : jeu de données minimal (institut, 2 enseignants, cours, élèves inscrits)
"""

from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.dependencies import get_current_teacher
from app.main import app
from app.models.course import Course
from app.models.institute import Institute
from app.models.student import Student, StudentCourse
from app.models.teacher import Teacher


def make_teacher_mock(teacher_id=1, institute_id=1):
    t = MagicMock(spec=Teacher)
    t.id = teacher_id
    t.institute_id = institute_id
    t.active = True
    t.last_sync = None
    return t


@pytest.fixture
def current_teacher():
    return make_teacher_mock()


@pytest.fixture
def client(current_teacher):
    """Client HTTP de test avec la BDD mockée et un enseignant authentifié."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_teacher] = lambda: current_teacher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """
    Session SQLAlchemy sur SQLite en mémoire.
    Le pilote pysqlite gère mal les SAVEPOINT : on désactive sa gestion implicite
    des transactions et on émet BEGIN nous-mêmes (recette de la doc SQLAlchemy).
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def school(db_session):
    """
    Institut avec deux enseignants.
    - course : cours de `teacher`, alice et bob inscrits (Active)
    - other_course : cours de `other_teacher`, alice inscrite
    - carol : inscrite à course mais inscription Dropped
    - dave : inscrit à course mais élève inactif
    """
    db = db_session
    institute = Institute(name="Institut Saint-Luc")
    db.add(institute)
    db.flush()

    teacher = Teacher(
        employee_id="T-001", first_name="Marie", last_name="Curie",
        email="marie@example.org", institute_id=institute.id,
    )
    other_teacher = Teacher(
        employee_id="T-002", first_name="Paul", last_name="Langevin",
        email="paul@example.org", institute_id=institute.id,
    )
    db.add_all([teacher, other_teacher])
    db.flush()

    course = Course(name="Physique", code="PHY101", institute_id=institute.id, teacher_id=teacher.id)
    other_course = Course(name="Chimie", code="CHM101", institute_id=institute.id, teacher_id=other_teacher.id)
    db.add_all([course, other_course])
    db.flush()

    alice = Student(registration_number="S-001", first_name="Alice", last_name="Dupont", institute_id=institute.id)
    bob = Student(registration_number="S-002", first_name="Bob", last_name="Martin", institute_id=institute.id)
    carol = Student(registration_number="S-003", first_name="Carol", last_name="Petit", institute_id=institute.id)
    dave = Student(
        registration_number="S-004", first_name="Dave", last_name="Leroy",
        institute_id=institute.id, active=False,
    )
    db.add_all([alice, bob, carol, dave])
    db.flush()

    db.add_all([
        StudentCourse(student_id=alice.id, course_id=course.id, status="Active", enrollment_date=date(2024, 1, 8)),
        StudentCourse(student_id=bob.id, course_id=course.id, status="Active", enrollment_date=date(2024, 1, 8)),
        StudentCourse(student_id=carol.id, course_id=course.id, status="Dropped", enrollment_date=date(2024, 1, 8)),
        StudentCourse(student_id=dave.id, course_id=course.id, status="Active", enrollment_date=date(2024, 1, 8)),
        StudentCourse(student_id=alice.id, course_id=other_course.id, status="Active", enrollment_date=date(2024, 1, 8)),
    ])
    db.commit()

    return SimpleNamespace(
        institute=institute,
        teacher=teacher,
        other_teacher=other_teacher,
        course=course,
        other_course=other_course,
        alice=alice,
        bob=bob,
        carol=carol,
        dave=dave,
    )
