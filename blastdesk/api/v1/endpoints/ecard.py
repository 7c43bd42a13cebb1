import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import TemplateNotFoundError, ValidationError
from blastdesk.models import EmailTemplate, User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.template import EcardPreviewRequest
from blastdesk.services.backdrop_storage import BackdropStorage, get_backdrop_storage
from blastdesk.services.ecard_service import EcardLayout, generate_ecard_pdf, render_ecard_preview

router = APIRouter()


@router.post("/preview")
async def preview_ecard(
    payload: EcardPreviewRequest,
    db: AsyncSession = Depends(get_db),
    storage: BackdropStorage = Depends(get_backdrop_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Render an e-card for a sample name and role.

    Layout comes from the stored template when templateId is given, otherwise
    from the request body.
    """
    source = payload
    if payload.template_id:
        source = await db.get(EmailTemplate, payload.template_id)
        if not source:
            raise TemplateNotFoundError(payload.template_id)

    if not source.ecard_backdrop_path:
        raise ValidationError("An e-card backdrop is required for a preview", field="ecardBackdropPath")

    backdrop = await storage.read(source.ecard_backdrop_path)
    layout = EcardLayout.from_source(source)

    if payload.format == "png":
        content = await asyncio.to_thread(render_ecard_preview, payload.name, payload.role, backdrop, layout)
        return Response(content=content, media_type="image/png")

    content = await asyncio.to_thread(generate_ecard_pdf, payload.name, payload.role, backdrop, layout)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": "inline; filename=ecard.pdf"}
    )
