"""Notification (notifikasi) repository."""

from datetime import datetime, timezone

from supabase import Client

from koperasi.backend import call, execute
from koperasi.models.base import parse_json, parse_timestamp
from koperasi.models.notifikasi import Notifikasi


def _to_notifikasi(row: dict) -> Notifikasi:
    return Notifikasi(
        id=row["id"],
        anggota_id=row.get("anggota_id"),
        judul=row.get("judul") or "",
        pesan=row.get("pesan") or "",
        jenis=row.get("jenis") or "",
        is_read=row.get("is_read") is True,
        data=parse_json(row.get("data")),
        created_at=parse_timestamp(row.get("created_at")),
        source=row.get("source"),
    )


class NotifikasiRepository:
    """Repository for Notifikasi data access operations."""

    def __init__(self, client: Client):
        """
        Initialize the repository with a Supabase client.

        Args:
            client: Supabase client
        """
        self._client = client

    def create(self, notifikasi: Notifikasi) -> None:
        """
        Insert a notification row.

        Args:
            notifikasi: The notification to create; id and timestamps are
                assigned here
        """
        now = datetime.now(timezone.utc).isoformat()
        execute(
            self._client.table("notifikasi").insert(
                {
                    "anggota_id": notifikasi.anggota_id,
                    "judul": notifikasi.judul,
                    "pesan": notifikasi.pesan,
                    "jenis": notifikasi.jenis,
                    "is_read": notifikasi.is_read,
                    "data": notifikasi.data,
                    "created_at": now,
                    "updated_at": now,
                }
            ),
            "create notifikasi",
        )

    def find_by_anggota(self, anggota_id: str, limit: int) -> list[Notifikasi]:
        """Notifications addressed to one member, newest first."""
        response = execute(
            self._client.table("notifikasi")
            .select("*")
            .eq("anggota_id", anggota_id)
            .order("created_at", desc=True)
            .limit(limit),
            "fetch notifikasi",
        )
        return [_to_notifikasi(row) for row in response.data]

    def find_by_types(self, jenis: list[str] | tuple[str, ...], limit: int) -> list[Notifikasi]:
        """Notifications of the given types for any member, newest first."""
        response = execute(
            self._client.table("notifikasi")
            .select("*")
            .in_("jenis", list(jenis))
            .order("created_at", desc=True)
            .limit(limit),
            "fetch broadcast notifikasi",
        )
        return [_to_notifikasi(row) for row in response.data]

    def find_by_anggota_and_type(
        self,
        anggota_id: str,
        jenis: str,
        limit: int | None = None,
        since: datetime | None = None,
    ) -> list[Notifikasi]:
        """
        Notifications of one type for a member, newest first.

        Args:
            anggota_id: The member id
            jenis: Notification type
            limit: Maximum rows, or None for every row
            since: Only rows created at or after this instant
        """
        query = (
            self._client.table("notifikasi")
            .select("*")
            .eq("anggota_id", anggota_id)
            .eq("jenis", jenis)
        )
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        query = query.order("created_at", desc=True)
        if limit is not None:
            query = query.limit(limit)
        response = execute(query, f"fetch {jenis} notifikasi")
        return [_to_notifikasi(row) for row in response.data]

    def count_unread(self, anggota_id: str) -> int:
        response = execute(
            self._client.table("notifikasi")
            .select("*", count="exact", head=True)
            .eq("anggota_id", anggota_id)
            .eq("is_read", False),
            "count unread notifikasi",
        )
        return response.count or 0

    def mark_read(self, notifikasi_id: str) -> None:
        execute(
            self._client.table("notifikasi")
            .update({"is_read": True, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", notifikasi_id),
            "mark notifikasi read",
        )

    def mark_all_read(self, anggota_id: str) -> None:
        execute(
            self._client.table("notifikasi")
            .update({"is_read": True, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("anggota_id", anggota_id)
            .eq("is_read", False),
            "mark all notifikasi read",
        )

    def find_jatuh_tempo(self, anggota_id: str) -> list[Notifikasi]:
        """Due-date notifications prepared by the get_jatuh_tempo_notifications procedure."""
        rows = call(self._client, "get_jatuh_tempo_notifications", {"member_id": anggota_id})
        return [_to_notifikasi(row) for row in rows or []]
