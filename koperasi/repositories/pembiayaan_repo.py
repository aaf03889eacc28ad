"""Loan (pembiayaan) repository."""

from supabase import Client

from koperasi.backend import execute
from koperasi.models.base import parse_timestamp
from koperasi.models.pembiayaan import AKTIF, DITOLAK, LUNAS, Pembiayaan


def _to_pembiayaan(row: dict) -> Pembiayaan:
    return Pembiayaan(
        id=row["id"],
        anggota_id=row["anggota_id"],
        jenis_pinjaman=row.get("jenis_pinjaman") or "",
        status=row["status"],
        jumlah=row.get("jumlah") or 0,
        jatuh_tempo=parse_timestamp(row.get("jatuh_tempo")),
        total_pembayaran=row.get("total_pembayaran") or 0,
        sisa_pembayaran=row.get("sisa_pembayaran") or 0,
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


class PembiayaanRepository:
    """Repository for the pembiayaan table."""

    def __init__(self, client: Client):
        self._client = client

    def find_by_anggota(self, anggota_id: str) -> list[Pembiayaan]:
        """Return all loans of a member, newest first."""
        response = execute(
            self._client.table("pembiayaan")
            .select("*")
            .eq("anggota_id", anggota_id)
            .order("created_at", desc=True),
            f"fetch pembiayaan for anggota {anggota_id}",
        )
        return [_to_pembiayaan(row) for row in response.data]

    def find_by_id(self, pembiayaan_id: str) -> Pembiayaan | None:
        response = execute(
            self._client.table("pembiayaan").select("*").eq("id", pembiayaan_id).limit(1),
            f"fetch pembiayaan {pembiayaan_id}",
        )
        return _to_pembiayaan(response.data[0]) if response.data else None

    def find_history(self, anggota_id: str) -> list[Pembiayaan]:
        """Return settled or rejected loans, most recently updated first."""
        response = execute(
            self._client.table("pembiayaan")
            .select("*")
            .eq("anggota_id", anggota_id)
            .in_("status", [LUNAS, DITOLAK])
            .order("updated_at", desc=True),
            "fetch pembiayaan history",
        )
        return [_to_pembiayaan(row) for row in response.data]

    def find_active(self, anggota_id: str | None = None) -> list[Pembiayaan]:
        """
        Return active loans.

        Args:
            anggota_id: Restrict to one member, or None for every member
        """
        query = self._client.table("pembiayaan").select("*").eq("status", AKTIF)
        if anggota_id is not None:
            query = query.eq("anggota_id", anggota_id)
        response = execute(query, "fetch active pembiayaan")
        return [_to_pembiayaan(row) for row in response.data]
