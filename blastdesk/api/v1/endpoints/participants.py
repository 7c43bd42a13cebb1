from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_, select
from datetime import datetime
from typing import List, Optional

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import (
    ConflictError,
    DepartmentNotFoundError,
    ParticipantNotFoundError,
    ValidationError,
)
from blastdesk.core.logging_config import logger
from blastdesk.core.types import generate_uuid
from blastdesk.models import Department, Participant, User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.participant import (
    ParticipantCreate,
    ParticipantImportResponse,
    ParticipantResponse,
    ParticipantUpdate,
)
from blastdesk.services.activity_log_service import log_activity
from blastdesk.services.participant_csv import export_participants_csv, parse_participants_csv

router = APIRouter()


async def ensure_department(db: AsyncSession, department_id: str) -> Department:
    department = await db.get(Department, department_id)
    if not department:
        raise DepartmentNotFoundError(department_id)
    return department


@router.get("", response_model=List[ParticipantResponse])
async def list_participants(
    department_id: Optional[str] = Query(None, alias="departmentId"),
    search: Optional[str] = Query(None, max_length=255),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List participants, optionally filtered by department or a name/email/role search"""
    query = select(Participant)

    if department_id:
        query = query.where(Participant.department_id == department_id)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Participant.name.ilike(pattern),
            Participant.email.ilike(pattern),
            Participant.role.ilike(pattern),
        ))

    result = await db.execute(query.order_by(Participant.name))
    return result.scalars().all()


@router.get("/export")
async def export_participants(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Export all participants as CSV"""
    participants = (await db.execute(select(Participant).order_by(Participant.name))).scalars().all()
    departments = (await db.execute(select(Department))).scalars().all()

    filename = f"participants_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.csv"

    return StreamingResponse(
        iter([export_participants_csv(participants, departments)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.post("/import", response_model=ParticipantImportResponse)
async def import_participants(
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Import participants from an uploaded CSV file"""
    if file is None:
        raise ValidationError("No file uploaded.", field="file")

    content = await file.read()
    departments = (await db.execute(select(Department))).scalars().all()
    parsed = parse_participants_csv(content, departments)

    stamp = int(datetime.utcnow().timestamp() * 1000)
    created = []
    for row in parsed.rows:
        participant = Participant(
            id=f"p_{stamp}_{row.line}",
            name=row.name,
            email=row.email,
            role=row.role,
            department_id=row.department_id,
            pa_email=row.pa_email,
        )
        db.add(participant)
        created.append(participant)

    log_activity(
        db, current_user.username, "Participant Import",
        f"Imported {parsed.imported} participants from {file.filename or 'CSV'} ({parsed.skipped} skipped)"
    )
    await db.flush()
    logger.info(f"[Participants] CSV import: {parsed.imported} imported, {parsed.skipped} skipped")

    return {
        "imported": parsed.imported,
        "skipped": parsed.skipped,
        "message": parsed.message,
        "participants": created,
    }


@router.post("", response_model=ParticipantResponse)
async def create_participant(
    payload: ParticipantCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await ensure_department(db, payload.department_id)

    participant_id = payload.id or generate_uuid()
    if await db.get(Participant, participant_id):
        raise ConflictError(f"Participant with ID '{participant_id}' already exists", field="id")

    participant = Participant(
        id=participant_id,
        name=payload.name.strip(),
        email=payload.email,
        role=payload.role,
        department_id=payload.department_id,
        pa_email=payload.pa_email,
    )
    db.add(participant)
    log_activity(db, current_user.username, "Participant Creation", f"Participant {participant.name} created")
    await db.flush()
    return participant


@router.put("/{participant_id}", response_model=ParticipantResponse)
async def update_participant(
    participant_id: str,
    payload: ParticipantUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    participant = await db.get(Participant, participant_id)
    if not participant:
        raise ParticipantNotFoundError(participant_id)

    await ensure_department(db, payload.department_id)

    participant.name = payload.name.strip()
    participant.email = payload.email
    participant.role = payload.role
    participant.department_id = payload.department_id
    participant.pa_email = payload.pa_email

    log_activity(
        db, current_user.username, "Participant Update",
        f"Participant {participant_id} ({participant.name}) updated"
    )
    return participant


@router.delete("/{participant_id}")
async def delete_participant(
    participant_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    participant = await db.get(Participant, participant_id)
    if not participant:
        raise ParticipantNotFoundError(participant_id)

    await db.delete(participant)
    log_activity(db, current_user.username, "Participant Deletion", f"Participant {participant_id} deleted")
    return {"deletedID": participant_id}
