from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import ConflictError, TemplateNotFoundError
from blastdesk.core.types import generate_uuid
from blastdesk.models import EmailTemplate, User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate
from blastdesk.services.activity_log_service import log_activity

router = APIRouter()

# Columns a create/update payload writes
TEMPLATE_FIELDS = (
    "name", "subject", "body", "category", "ecard_backdrop_path",
    "name_x", "name_y", "name_font_size", "name_color",
    "role_x", "role_y", "role_font_size", "role_color",
)


def apply_payload(template: EmailTemplate, payload: TemplateUpdate) -> None:
    for field in TEMPLATE_FIELDS:
        setattr(template, field, getattr(payload, field))
    if not template.ecard_backdrop_path:
        template.ecard_backdrop_path = None


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(select(EmailTemplate).order_by(EmailTemplate.name))
    return result.scalars().all()


@router.post("", response_model=TemplateResponse)
async def create_template(
    payload: TemplateCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    template_id = payload.id or generate_uuid()
    if await db.get(EmailTemplate, template_id):
        raise ConflictError(f"Template with ID '{template_id}' already exists", field="id")

    template = EmailTemplate(id=template_id)
    apply_payload(template, payload)
    db.add(template)
    log_activity(db, current_user.username, "Template Creation", f"Template {template.name} created")
    await db.flush()
    return template


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    payload: TemplateUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    template = await db.get(EmailTemplate, template_id)
    if not template:
        raise TemplateNotFoundError(template_id)

    apply_payload(template, payload)
    log_activity(
        db, current_user.username, "Template Update",
        f"Template {template_id} ({template.name}) updated"
    )
    await db.flush()
    return template


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    template = await db.get(EmailTemplate, template_id)
    if not template:
        raise TemplateNotFoundError(template_id)

    await db.delete(template)
    log_activity(db, current_user.username, "Template Deletion", f"Template {template_id} deleted")
    return {"deletedID": template_id}
