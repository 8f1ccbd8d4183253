"""
Schémas Pydantic pour la consultation des présences par l'enseignant :
listing paginé, synthèse journalière et rapport par cours.
"""

import datetime as dt
from typing import Dict, List, Optional

from app.schemas.base import CamelModel


class AttendanceListItem(CamelModel):
    id: int
    student_id: int
    course_id: int
    date: dt.date
    status: str
    time_in: Optional[dt.time]
    remarks: Optional[str]
    fingerprint_verified: bool
    synced_from_offline: bool
    created_at: Optional[dt.datetime]

    model_config = {"from_attributes": True}


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class AttendancePage(CamelModel):
    attendance: List[AttendanceListItem]
    pagination: Pagination


class StatusCounts(CamelModel):
    present: int = 0
    late: int = 0
    absent: int = 0
    total: int = 0

    def add(self, status: str, count: int) -> None:
        field = status.lower()
        setattr(self, field, getattr(self, field) + count)
        self.total += count


class CourseCounts(StatusCounts):
    id: int
    name: str
    code: str


class DailySummary(CamelModel):
    date: dt.date
    status_counts: StatusCounts
    course_counts: List[CourseCounts]


class CourseSummary(CamelModel):
    id: int
    name: str
    code: str

    model_config = {"from_attributes": True}


class StudentSummary(CamelModel):
    id: int
    registration_number: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class ReportCell(CamelModel):
    """Statut d'un élève pour une date du rapport (Absent implicite si aucune présence)."""
    status: str
    time_in: Optional[dt.time] = None
    fingerprint_verified: bool = False


class StudentStatistics(StatusCounts):
    student_id: int


class CourseReport(CamelModel):
    course: CourseSummary
    dates: List[dt.date]                                 # Dates ayant au moins une présence, décroissantes
    students: List[StudentSummary]
    attendance: Dict[str, Dict[int, ReportCell]]         # "YYYY-MM-DD" → student_id → cellule
    statistics: List[StudentStatistics]
