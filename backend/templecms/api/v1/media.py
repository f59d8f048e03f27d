"""Admin image uploads stored in S3 / MinIO.

POST   /admin/uploads          multipart ``file`` → {id, url, s3_key}
GET    /admin/uploads
DELETE /admin/uploads/{id}
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from templecms.core.dependencies import get_db, require_admin
from templecms.models.media_asset import MediaAsset
from templecms.models.user import User
from templecms.schemas.media import MediaAssetResponse, UploadResponse
from templecms.services import storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UploadResponse, status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UploadResponse:
    content_type = (file.content_type or "").lower()
    if content_type not in storage.ALLOWED_CONTENT_TYPES:
        allowed = ", ".join(sorted(storage.ALLOWED_CONTENT_TYPES))
        raise HTTPException(status_code=400, detail=f"content type must be one of: {allowed}")

    data = await file.read(storage.MAX_UPLOAD_SIZE + 1)
    if len(data) > storage.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="File exceeds the 10 MB upload limit")
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    file_name = file.filename or "upload"
    key = storage.build_upload_key(file_name)
    url = await run_in_threadpool(storage.put_object, key, data, content_type)

    asset = MediaAsset(
        s3_key=key,
        url=url,
        file_name=file_name,
        content_type=content_type,
        size_bytes=len(data),
        uploaded_by=admin.id,
    )
    db.add(asset)
    try:
        await db.flush()
    except Exception:
        await run_in_threadpool(storage.delete_object, key)
        raise
    await db.refresh(asset)
    logger.info("Admin %s uploaded %s", admin.username, key)
    return UploadResponse(id=asset.id, url=asset.url, s3_key=asset.s3_key)


@router.get("", response_model=list[MediaAssetResponse])
async def list_uploads(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[MediaAssetResponse]:
    result = await db.execute(
        select(MediaAsset)
        .order_by(MediaAsset.created_at.desc(), MediaAsset.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return [MediaAssetResponse.model_validate(a) for a in result.scalars().all()]


@router.delete("/{asset_id}", status_code=204)
async def delete_upload(
    asset_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    asset = await db.get(MediaAsset, asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail="Upload not found")
    await run_in_threadpool(storage.delete_object, asset.s3_key)
    await db.delete(asset)
    await db.flush()
