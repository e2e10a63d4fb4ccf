"""File repository for metadata index operations."""

import sqlite3
from typing import List, Optional

from common.logging_config import get_logger
from relay.database import get_db_connection
from relay.exceptions import DuplicateKeyError
from relay.types import FileRecord, Handle

logger = get_logger(__name__)

_COLUMNS = "url, file_id, message_id, created_at, file_name, file_size, mime_type"


def _row_to_record(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        url=row["url"],
        handle=Handle(object_id=row["file_id"], message_ref=row["message_id"]),
        created_at=row["created_at"],
        file_name=row["file_name"],
        file_size=row["file_size"],
        mime_type=row["mime_type"],
    )


def _escape_like(query: str) -> str:
    return query.replace("!", "!!").replace("%", "!%").replace("_", "!_")


class FileRepository:
    @staticmethod
    def insert(record: FileRecord) -> FileRecord:
        """
        Insert a new FileRecord.

        Raises:
            DuplicateKeyError: If the URL is already indexed
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    f"INSERT INTO files ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.url,
                        record.handle.object_id,
                        record.handle.message_ref,
                        record.created_at,
                        record.file_name,
                        record.file_size,
                        record.mime_type,
                    )
                )
                conn.commit()
            except sqlite3.IntegrityError:
                logger.warning(f"Duplicate url rejected by metadata index [url={record.url}]")
                raise DuplicateKeyError(f"File URL already exists: {record.url}")

        logger.debug(f"Indexed file [url={record.url}]")
        return record

    @staticmethod
    def get_by_url(url: str) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM files WHERE url = ?", (url,))
            row = cursor.fetchone()

            if row is None:
                return None

            return _row_to_record(row)

    @staticmethod
    def delete_by_url(url: str) -> bool:
        """
        Delete the FileRecord for a URL.

        Returns:
            True if a row was removed
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM files WHERE url = ?", (url,))
            conn.commit()
            deleted = cursor.rowcount > 0

        logger.debug(f"Removed file from index [url={url}] [deleted={deleted}]")
        return deleted

    @staticmethod
    def search(query: str) -> List[FileRecord]:
        """
        Case-insensitive substring search on file names, newest first.

        An empty query matches every record.
        """
        pattern = f"%{_escape_like(query)}%"
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_COLUMNS} FROM files
                WHERE COALESCE(file_name, '') LIKE ? ESCAPE '!'
                ORDER BY created_at DESC
                """,
                (pattern,)
            )
            return [_row_to_record(row) for row in cursor.fetchall()]

    @staticmethod
    def list_all() -> List[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM files ORDER BY created_at DESC")
            return [_row_to_record(row) for row in cursor.fetchall()]
