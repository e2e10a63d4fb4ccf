"""Schema validation tests to prevent SQL query mismatches."""

import sqlite3


def get_table_columns(db_path, table_name: str) -> set:
    """
    Get all column names for a table from the database schema.
    """
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute(f"PRAGMA table_info({table_name})")
    columns = {row[1] for row in cursor.fetchall()}
    conn.close()
    return columns


class TestFilesSchema:
    """Validate the files table against the repository queries."""

    def test_files_table_columns(self, test_db):
        assert get_table_columns(test_db, "files") == {
            "url",
            "file_id",
            "message_id",
            "created_at",
            "file_name",
            "file_size",
            "mime_type",
        }

    def test_url_is_primary_key(self, test_db):
        conn = sqlite3.connect(test_db)
        cursor = conn.cursor()
        cursor.execute("PRAGMA table_info(files)")
        primary_keys = [row[1] for row in cursor.fetchall() if row[5]]
        conn.close()
        assert primary_keys == ["url"]

    def test_init_database_is_idempotent(self, test_db):
        from relay.database import init_database

        init_database()
        assert "url" in get_table_columns(test_db, "files")
