import logging
import os
import time
from typing import Optional

from clients import supabase_client
from models.study_models import SourceFile
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def build_storage_path(user_id: str, file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Storage path convention: {userId}/{timestamp}.{ext}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    ext = os.path.splitext(file_name)[1].lstrip(".").lower()
    if not ext:
        return f"{user_id}/{timestamp_ms}"
    return f"{user_id}/{timestamp_ms}.{ext}"


def upload_source_file(
    user_id: str,
    file_name: str,
    data: bytes,
    media_type: Optional[str] = None,
    category: str = "document"
) -> SourceFile:
    """
    Upload bytes to storage, then record the file row.
    Raises:
        ValidationError for a missing user or name; UpstreamError / PersistenceError from the store.
    """
    if not user_id or not file_name:
        raise ValidationError("user_id and file name are required")

    path = build_storage_path(user_id, file_name)
    supabase_client.upload_file(path, data, content_type=media_type)
    row = supabase_client.insert_row("files", {
        "user_id": user_id,
        "name": file_name,
        "file_path": path,
        "file_size": len(data),
        "file_type": media_type or "application/octet-stream",
        "category": category,
    })
    logger.info(f"Stored {file_name} for user {user_id} at {path}")
    return SourceFile.model_validate(row)
