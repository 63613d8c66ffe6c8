# mlshelf/api/v1/models.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ... import deps
from ...domain.errors import ModelValidationError, UploadError
from ...domain.models import ModelMetadata
from ...domain.schemas import DownloadLinkOut, ModelRecordOut
from ...domain.session import SessionContext
from ...domain.shelf import ModelShelf
from ...domain.validation import parse_tags

router = APIRouter()


@router.get("", response_model=List[ModelRecordOut])
def list_models(shelf: ModelShelf = Depends(deps.get_shelf)):
    models = shelf.refresh()
    if shelf.error:
        raise HTTPException(status_code=502, detail=shelf.error)
    return [ModelRecordOut.model_validate(m) for m in models]


@router.get("/mine", response_model=List[ModelRecordOut])
def list_my_models(
    shelf: ModelShelf = Depends(deps.get_shelf),
    ctx: SessionContext = Depends(deps.require_user),
):
    return [ModelRecordOut.model_validate(m) for m in shelf.user_models(ctx.user_id)]


@router.post("", response_model=ModelRecordOut, status_code=status.HTTP_201_CREATED)
async def upload_model(
    file: Optional[UploadFile] = File(default=None),
    name: str = Form(default=""),
    description: str = Form(default=""),
    framework: str = Form(default=""),
    format: str = Form(default=""),
    tags: str = Form(default=""),
    shelf: ModelShelf = Depends(deps.get_shelf),
    ctx: SessionContext = Depends(deps.require_user),
):
    model_file = await deps.read_model_file(file, shelf.max_upload_bytes)
    metadata = ModelMetadata(
        name=name,
        description=description,
        framework=framework,
        format=format,
        tags=parse_tags(tags),
    )
    try:
        record = shelf.upload(model_file, metadata, ctx.user_id)
    except ModelValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return ModelRecordOut.model_validate(record)


@router.post("/{id}/download", response_model=DownloadLinkOut)
def download_model(id: str, shelf: ModelShelf = Depends(deps.get_shelf)):
    record = shelf.find(id)
    if record is None:
        raise HTTPException(status_code=404, detail="Model not found")
    link = shelf.download(record, refresh=False)
    if link is None:
        raise HTTPException(status_code=502, detail="Download failed. Please try again.")
    return DownloadLinkOut.model_validate(link)
