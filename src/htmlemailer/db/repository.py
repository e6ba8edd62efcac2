"""CRUD operations for the template client's SQLite store."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Optional

from htmlemailer.core.database import get_connection
from htmlemailer.core.models import SendRecord, SenderConfig, Template, TemplatePreview


class Repository:
    """Templates, sender identity and send history for one client."""

    def __init__(self, db_path: str, history_limit: int = 100) -> None:
        self.db_path = db_path
        self.history_limit = history_limit

    def _conn(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    # ---- Templates ----

    @staticmethod
    def _row_to_template(row: sqlite3.Row) -> Template:
        return Template(
            id=row["id"],
            name=row["name"],
            content=row["content"],
            size=row["size"],
            date_added=datetime.fromisoformat(row["date_added"]),
            preview=TemplatePreview(title=row["preview_title"], content=row["preview_content"]),
            warnings=json.loads(row["warnings_json"] or "[]"),
        )

    def save_template(self, template: Template) -> None:
        conn = self._conn()
        conn.execute(
            """INSERT OR REPLACE INTO templates
               (id, name, content, size, date_added, preview_title, preview_content, warnings_json)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                template.id,
                template.name,
                template.content,
                template.size,
                template.date_added.isoformat(),
                template.preview.title,
                template.preview.content,
                json.dumps(template.warnings),
            ),
        )
        conn.commit()
        conn.close()

    def get_template(self, template_id: str) -> Optional[Template]:
        conn = self._conn()
        row = conn.execute("SELECT * FROM templates WHERE id = ?", (template_id,)).fetchone()
        conn.close()
        return self._row_to_template(row) if row else None

    def get_templates(self) -> list[Template]:
        conn = self._conn()
        rows = conn.execute("SELECT * FROM templates ORDER BY date_added").fetchall()
        conn.close()
        return [self._row_to_template(r) for r in rows]

    def delete_template(self, template_id: str) -> bool:
        conn = self._conn()
        cur = conn.execute("DELETE FROM templates WHERE id = ?", (template_id,))
        conn.commit()
        conn.close()
        return cur.rowcount > 0

    def clear_templates(self) -> int:
        conn = self._conn()
        cur = conn.execute("DELETE FROM templates")
        conn.commit()
        conn.close()
        return cur.rowcount

    # ---- Sender config ----

    def save_sender_config(self, config: SenderConfig) -> None:
        conn = self._conn()
        conn.execute(
            """INSERT OR REPLACE INTO sender_config (id, from_email, from_name, saved_at)
               VALUES (1, ?, ?, ?)""",
            (config.from_email, config.from_name, config.saved_at.isoformat()),
        )
        conn.commit()
        conn.close()

    def get_sender_config(self) -> Optional[SenderConfig]:
        conn = self._conn()
        row = conn.execute("SELECT * FROM sender_config WHERE id = 1").fetchone()
        conn.close()
        if not row:
            return None
        return SenderConfig(
            from_email=row["from_email"],
            from_name=row["from_name"] or "",
            saved_at=datetime.fromisoformat(row["saved_at"]),
        )

    def clear_sender_config(self) -> None:
        conn = self._conn()
        conn.execute("DELETE FROM sender_config")
        conn.commit()
        conn.close()

    # ---- Send history ----

    def save_send_record(self, record: SendRecord) -> None:
        """Append a record, then drop everything past the newest ``history_limit``."""
        conn = self._conn()
        conn.execute(
            """INSERT INTO send_history (template_name, subject, recipients_json, sent_at, email_id)
               VALUES (?, ?, ?, ?, ?)""",
            (
                record.template_name,
                record.subject,
                json.dumps(record.recipients),
                record.sent_at.isoformat(),
                record.email_id,
            ),
        )
        conn.execute(
            """DELETE FROM send_history WHERE id NOT IN
               (SELECT id FROM send_history ORDER BY id DESC LIMIT ?)""",
            (self.history_limit,),
        )
        conn.commit()
        conn.close()

    def get_send_history(self, limit: Optional[int] = None) -> list[SendRecord]:
        """Return records newest first."""
        conn = self._conn()
        rows = conn.execute(
            "SELECT * FROM send_history ORDER BY id DESC LIMIT ?",
            (limit if limit is not None else self.history_limit,),
        ).fetchall()
        conn.close()
        return [
            SendRecord(
                template_name=r["template_name"],
                subject=r["subject"],
                recipients=json.loads(r["recipients_json"]),
                sent_at=datetime.fromisoformat(r["sent_at"]),
                email_id=r["email_id"],
            )
            for r in rows
        ]

    def clear_send_history(self) -> None:
        conn = self._conn()
        conn.execute("DELETE FROM send_history")
        conn.commit()
        conn.close()
