import logging
from typing import Dict, Any, List, Optional
from supabase import create_client, Client

from utils.config import require_env, get_storage_bucket
from utils.exceptions import NotFoundError, PersistenceError, UpstreamError

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase() -> Client:
    global _supabase_client
    if _supabase_client is None:
        url = require_env("SUPABASE_URL")
        key = require_env("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY")
        _supabase_client = create_client(url, key)
    return _supabase_client


def get_file_record(file_id: str, user_id: str) -> Dict[str, Any]:
    """
    Fetch a row from the 'files' table owned by user_id.
    Args:
        file_id: UUID of the file row.
        user_id: UUID of the owning user.
    Returns:
        The file row as a dict.
    Raises:
        NotFoundError if the row is absent or belongs to another user.
    """
    response = get_supabase().table("files") \
        .select("id, user_id, name, file_path, file_type, file_size, category") \
        .eq("id", file_id) \
        .eq("user_id", user_id) \
        .limit(1) \
        .execute()
    if not response.data:
        raise NotFoundError(
            f"File {file_id} not found for user {user_id}",
            context={"file_id": file_id, "user_id": user_id},
        )
    return response.data[0]


def download_file(file_path: str) -> bytes:
    """
    Download an object from the student files bucket.
    Raises:
        UpstreamError if the storage layer rejects the download or returns nothing.
    """
    bucket = get_storage_bucket()
    try:
        data = get_supabase().storage.from_(bucket).download(file_path)
    except Exception as e:
        logger.error(f"Storage download failed for {bucket}/{file_path}: {e}")
        raise UpstreamError(
            f"Error accessing file: {file_path}",
            upstream_status=getattr(e, "status", None) or getattr(e, "status_code", None),
            upstream_body=str(e),
        ) from e
    if data is None:
        raise UpstreamError(f"Storage returned no data for {file_path}")
    return data


def upload_file(file_path: str, data: bytes, content_type: Optional[str] = None) -> str:
    """
    Upload bytes to the student files bucket at file_path.
    Returns:
        The storage path written.
    Raises:
        UpstreamError if the storage layer rejects the upload.
    """
    bucket = get_storage_bucket()
    file_options = {"content-type": content_type} if content_type else None
    try:
        get_supabase().storage.from_(bucket).upload(file_path, data, file_options)
    except Exception as e:
        logger.error(f"Storage upload failed for {bucket}/{file_path}: {e}")
        raise UpstreamError(
            f"Error uploading file: {file_path}",
            upstream_status=getattr(e, "status", None) or getattr(e, "status_code", None),
            upstream_body=str(e),
        ) from e
    logger.info(f"Uploaded {len(data)} bytes to {bucket}/{file_path}")
    return file_path


def insert_rows(table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Insert a batch of rows into a table in one request.
    Args:
        table: Table name.
        rows: Row dicts; all are sent together.
    Returns:
        The inserted rows as returned by the store.
    Raises:
        PersistenceError if the insert fails or the store does not return every row.
    """
    if not rows:
        raise PersistenceError(f"Refusing to insert an empty batch into '{table}'")
    try:
        response = get_supabase().table(table).insert(rows).execute()
    except Exception as e:
        logger.error(f"Supabase insert into '{table}' failed: {e}")
        raise PersistenceError(
            f"Batch insert into '{table}' was rejected: {e}",
            context={"table": table, "row_count": len(rows)},
        ) from e

    if not response.data or len(response.data) != len(rows):
        returned = len(response.data) if response.data else 0
        raise PersistenceError(
            f"Batch insert into '{table}' returned {returned} of {len(rows)} rows",
            context={"table": table, "row_count": len(rows), "returned": returned},
        )
    return response.data


def insert_row(table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a single row and return it."""
    return insert_rows(table, [row])[0]


def get_flashcard(flashcard_id: str, user_id: str) -> Dict[str, Any]:
    response = get_supabase().table("flashcards") \
        .select("*") \
        .eq("id", flashcard_id) \
        .eq("user_id", user_id) \
        .limit(1) \
        .execute()
    if not response.data:
        raise NotFoundError(
            f"Flashcard {flashcard_id} not found for user {user_id}",
            error_code="FLASHCARD_NOT_FOUND",
            context={"flashcard_id": flashcard_id, "user_id": user_id},
        )
    return response.data[0]


def update_flashcard(flashcard_id: str, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update one flashcard row owned by user_id.
    Raises:
        PersistenceError if the update fails or matches no row.
    """
    try:
        response = get_supabase().table("flashcards") \
            .update(fields) \
            .eq("id", flashcard_id) \
            .eq("user_id", user_id) \
            .execute()
    except Exception as e:
        logger.error(f"Flashcard update failed for {flashcard_id}: {e}")
        raise PersistenceError(f"Flashcard update was rejected: {e}") from e

    if not response.data:
        raise PersistenceError(
            f"Flashcard update matched no row: {flashcard_id}",
            context={"flashcard_id": flashcard_id},
        )
    return response.data[0]
