from app.core.exceptions import NotFoundError
from app.core.models import School
from app.core.tenant_scope import TenantScope

from .schemas import SchoolSettingsResponse, SchoolSettingsUpdate


async def _load_school(scope: TenantScope) -> School:
    school = await scope.db.get(School, scope.school_id)
    if school is None:
        raise NotFoundError("School not found")
    return school


async def get_school_settings(scope: TenantScope) -> SchoolSettingsResponse:
    return SchoolSettingsResponse.model_validate(await _load_school(scope))


async def update_school_settings(scope: TenantScope, payload: SchoolSettingsUpdate) -> SchoolSettingsResponse:
    school = await _load_school(scope)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        data["name"] = data["name"].strip()
    for field, value in data.items():
        # non-nullable columns keep their current value when null is sent
        if value is None and field in ("name", "currency_code", "currency_symbol", "date_format", "timezone"):
            continue
        setattr(school, field, value)
    await scope.db.commit()
    await scope.db.refresh(school)
    return SchoolSettingsResponse.model_validate(school)
