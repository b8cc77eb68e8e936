# auth tables are part of the same metadata (FK targets for users/roles)
from app.auth.models import Permission, Role, RolePermission, User  # noqa: F401
from app.core.models.school import School
from app.core.models.academic_session import AcademicSession
from app.core.models.class_model import SchoolClass
from app.core.models.section_model import ClassSection, Section
from app.core.models.subject import Subject
from app.core.models.department import Department, Designation
from app.core.models.staff import Staff
from app.core.models.student import Parent, SchoolHouse, Student, StudentCategory, StudentSession
from app.core.models.attendance import StaffAttendance, StudentAttendance
from app.core.models.fees import (
    FeeGroup,
    FeeGroupType,
    FeePayment,
    FeeType,
    FeesMaster,
    StudentFeesMaster,
)
from app.core.models.exam import Exam, ExamGroup, ExamGroupExam, ExamResult, ExamSubject
from app.core.models.library import Book, BookIssue, LibraryMember
from app.core.models.transport import PickupPoint, RouteVehicle, TransportRoute, Vehicle
from app.core.models.homework import Homework, HomeworkSubmission
from app.core.models.lesson_plan import LessonPlan
from app.core.models.front_office import Complaint, Enquiry, PhoneCallLog, PostalRecord, Visitor

__all__ = [
    "AcademicSession",
    "Book",
    "BookIssue",
    "ClassSection",
    "Complaint",
    "Department",
    "Designation",
    "Enquiry",
    "Exam",
    "ExamGroup",
    "ExamGroupExam",
    "ExamResult",
    "ExamSubject",
    "FeeGroup",
    "FeeGroupType",
    "FeePayment",
    "FeeType",
    "FeesMaster",
    "Homework",
    "LessonPlan",
    "HomeworkSubmission",
    "LibraryMember",
    "Parent",
    "PhoneCallLog",
    "PickupPoint",
    "PostalRecord",
    "RouteVehicle",
    "School",
    "SchoolClass",
    "SchoolHouse",
    "Section",
    "Staff",
    "StaffAttendance",
    "Student",
    "StudentAttendance",
    "StudentCategory",
    "StudentFeesMaster",
    "StudentSession",
    "Subject",
    "TransportRoute",
    "Vehicle",
    "Visitor",
]
