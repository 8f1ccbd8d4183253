"""
Consultation des présences côté enseignant : listing paginé, synthèse du jour,
rapport par cours. Toutes les requêtes sont restreintes aux présences de l'enseignant.
"""

import math
from datetime import date
from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.attendance import Attendance
from app.models.course import Course
from app.models.student import Student, StudentCourse
from app.models.teacher import Teacher
from app.schemas.report import (
    AttendanceListItem,
    AttendancePage,
    CourseCounts,
    CourseReport,
    CourseSummary,
    DailySummary,
    Pagination,
    ReportCell,
    StatusCounts,
    StudentStatistics,
    StudentSummary,
)


def list_attendance(
    db: Session,
    teacher: Teacher,
    course_id: Optional[int] = None,
    student_id: Optional[int] = None,
    day: Optional[date] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> AttendancePage:
    """Présences de l'enseignant, filtrées, de la plus récente à la plus ancienne."""
    page = page if page > 0 else 1
    limit = limit if limit and limit > 0 else settings.DEFAULT_PAGE_SIZE
    limit = min(limit, settings.MAX_PAGE_SIZE)

    filters = [
        Attendance.teacher_id == teacher.id,
        Attendance.institute_id == teacher.institute_id,
    ]
    if course_id:
        filters.append(Attendance.course_id == course_id)
    if student_id:
        filters.append(Attendance.student_id == student_id)
    if day:
        filters.append(Attendance.date == day)
    if status:
        filters.append(Attendance.status == status)

    total = db.execute(
        select(func.count()).select_from(Attendance).where(*filters)
    ).scalar() or 0

    rows = db.execute(
        select(Attendance)
        .where(*filters)
        .order_by(Attendance.date.desc(), Attendance.created_at.desc(), Attendance.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    ).scalars().all()

    return AttendancePage(
        attendance=[AttendanceListItem.model_validate(r) for r in rows],
        pagination=Pagination(
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit),
        ),
    )


def get_daily_summary(
    db: Session,
    teacher: Teacher,
    day: Optional[date] = None,
    course_id: Optional[int] = None,
) -> DailySummary:
    """Compteurs Present / Late / Absent du jour (aujourd'hui par défaut), globaux et par cours."""
    day = day or date.today()

    filters = [
        Attendance.teacher_id == teacher.id,
        Attendance.institute_id == teacher.institute_id,
        Attendance.date == day,
    ]
    if course_id:
        filters.append(Attendance.course_id == course_id)

    rows = db.execute(
        select(Course.id, Course.name, Course.code, Attendance.status, func.count(Attendance.id))
        .select_from(Attendance)
        .join(Course, Course.id == Attendance.course_id)
        .where(*filters)
        .group_by(Course.id, Course.name, Course.code, Attendance.status)
        .order_by(Course.name)
    ).all()

    status_counts = StatusCounts()
    by_course: Dict[int, CourseCounts] = {}
    for cid, name, code, status, count in rows:
        status_counts.add(status, count)
        if cid not in by_course:
            by_course[cid] = CourseCounts(id=cid, name=name, code=code)
        by_course[cid].add(status, count)

    return DailySummary(
        date=day,
        status_counts=status_counts,
        course_counts=list(by_course.values()),
    )


def get_course_report(
    db: Session,
    teacher: Teacher,
    course_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> CourseReport:
    """
    Rapport de présences d'un cours de l'enseignant sur une période.

    Les dates du rapport sont celles où au moins une présence a été saisie.
    Un élève inscrit sans présence à l'une de ces dates est compté absent.

    Lève ValueError si le cours est introuvable ou n'appartient pas à l'enseignant.
    """
    course = db.execute(
        select(Course).where(Course.id == course_id, Course.teacher_id == teacher.id)
    ).scalar()
    if course is None:
        raise ValueError(f"Cours {course_id} introuvable.")

    students = db.execute(
        select(Student)
        .join(StudentCourse, StudentCourse.student_id == Student.id)
        .where(StudentCourse.course_id == course_id)
        .order_by(Student.first_name, Student.last_name)
    ).scalars().all()
    student_ids = [s.id for s in students]

    filters = [Attendance.course_id == course_id, Attendance.student_id.in_(student_ids)]
    if start_date:
        filters.append(Attendance.date >= start_date)
    if end_date:
        filters.append(Attendance.date <= end_date)

    records = db.execute(
        select(Attendance).where(*filters).order_by(Attendance.date.desc())
    ).scalars().all() if student_ids else []

    attendance: Dict[str, Dict[int, ReportCell]] = {}
    for record in records:
        attendance.setdefault(record.date.isoformat(), {})[record.student_id] = ReportCell(
            status=record.status,
            time_in=record.time_in,
            fingerprint_verified=bool(record.fingerprint_verified),
        )

    dates = sorted({r.date for r in records}, reverse=True)

    statistics = []
    for sid in student_ids:
        stats = StudentStatistics(student_id=sid)
        for day in dates:
            cells = attendance[day.isoformat()]
            if sid not in cells:
                cells[sid] = ReportCell(status="Absent")
            stats.add(cells[sid].status, 1)
        statistics.append(stats)

    return CourseReport(
        course=CourseSummary.model_validate(course),
        dates=dates,
        students=[StudentSummary.model_validate(s) for s in students],
        attendance=attendance,
        statistics=statistics,
    )
