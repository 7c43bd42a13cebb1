from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse
from typing import Optional

from blastdesk.core.exceptions import ValidationError
from blastdesk.models import User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.base import MessageResponse
from blastdesk.schemas.misc import BackdropListing, BackdropUploadResponse, FolderCreate
from blastdesk.services.backdrop_storage import BackdropStorage, get_backdrop_storage

router = APIRouter()


@router.post("/upload-ecard-backdrop", response_model=BackdropUploadResponse)
async def upload_backdrop(
    ecard_backdrop: Optional[UploadFile] = File(None, alias="ecardBackdrop"),
    path: str = Query("/"),
    storage: BackdropStorage = Depends(get_backdrop_storage),
    current_user: User = Depends(get_current_user)
):
    """Upload a backdrop image into a folder under the upload directory"""
    if ecard_backdrop is None:
        raise ValidationError("No file uploaded.", field="ecardBackdrop")

    # Reject on extension before reading the body
    storage.validate_upload(ecard_backdrop.filename, 0)
    content = await ecard_backdrop.read()

    file_path = await storage.save(path, ecard_backdrop.filename, content)
    return {"file_path": file_path}


@router.get("/ecard-backdrop/{file_path:path}")
async def get_backdrop(
    file_path: str,
    storage: BackdropStorage = Depends(get_backdrop_storage)
):
    """Serve a stored backdrop (public, used by e-mail clients and previews)"""
    return FileResponse(storage.locate(file_path))


@router.get("/ecard-backdrops", response_model=BackdropListing)
async def list_backdrops(
    path: str = Query("/"),
    storage: BackdropStorage = Depends(get_backdrop_storage),
    current_user: User = Depends(get_current_user)
):
    return storage.list_folder(path)


@router.post("/ecard-backdrops/folders", response_model=MessageResponse)
async def create_folder(
    payload: FolderCreate,
    path: str = Query("/"),
    storage: BackdropStorage = Depends(get_backdrop_storage),
    current_user: User = Depends(get_current_user)
):
    storage.create_folder(path, payload.folder_name)
    return {"message": "Folder created successfully"}
