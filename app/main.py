from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.academic_sessions.router import router as sessions_router
from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.auth.roles_router import permissions_router
from app.api.v1.auth.roles_router import router as roles_router
from app.api.v1.auth.router import router as auth_router
from app.api.v1.classes.classes_router import router as classes_router
from app.api.v1.departments.department_router import designations_router
from app.api.v1.departments.department_router import router as departments_router
from app.api.v1.exam_groups.router import router as exam_groups_router
from app.api.v1.exams.router import router as exams_router
from app.api.v1.fees.router import router as fees_router
from app.api.v1.front_office.router import router as front_office_router
from app.api.v1.homework.router import router as homework_router
from app.api.v1.lesson_plans.router import router as lesson_plans_router
from app.api.v1.library.router import router as library_router
from app.api.v1.parents.router import router as parents_router
from app.api.v1.school_houses.router import router as school_houses_router
from app.api.v1.sections.sections_router import router as sections_router
from app.api.v1.settings.router import router as settings_router
from app.api.v1.staff.router import router as staff_router
from app.api.v1.student_categories.router import router as student_categories_router
from app.api.v1.students.router import router as students_router
from app.api.v1.subjects.router import router as subjects_router
from app.api.v1.transport.router import router as transport_router
from app.api.v1.users.router import router as users_router
from app.core.app_logger import setup_logging
from app.core.config import settings
from app.core.error_handlers import register_error_handlers


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="School Management Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(roles_router)
    app.include_router(permissions_router)
    app.include_router(users_router)
    app.include_router(sessions_router)
    app.include_router(settings_router)
    app.include_router(school_houses_router)
    app.include_router(classes_router)
    app.include_router(sections_router)
    app.include_router(subjects_router)
    app.include_router(lesson_plans_router)
    app.include_router(departments_router)
    app.include_router(designations_router)
    app.include_router(staff_router)
    app.include_router(student_categories_router)
    app.include_router(students_router)
    app.include_router(parents_router)
    app.include_router(attendance_router)
    app.include_router(fees_router)
    app.include_router(exam_groups_router)
    app.include_router(exams_router)
    app.include_router(library_router)
    app.include_router(transport_router)
    app.include_router(homework_router)
    app.include_router(front_office_router)

    return app


app = create_app()
