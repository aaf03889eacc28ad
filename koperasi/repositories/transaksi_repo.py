"""Transaction (transaksi) repository."""

from datetime import datetime, timezone

from supabase import Client

from koperasi.backend import execute
from koperasi.models.base import parse_timestamp
from koperasi.models.transaksi import Transaksi


def _to_transaksi(row: dict) -> Transaksi:
    return Transaksi(
        id=row["id"],
        anggota_id=row.get("anggota_id"),
        tabungan_id=row.get("tabungan_id"),
        pembiayaan_id=row.get("pembiayaan_id"),
        tipe_transaksi=row["tipe_transaksi"],
        kategori=row.get("kategori") or "lainnya",
        deskripsi=row.get("deskripsi") or "",
        reference_number=row.get("reference_number"),
        jumlah=row.get("jumlah") or 0,
        saldo_sebelum=row.get("saldo_sebelum"),
        saldo_sesudah=row.get("saldo_sesudah"),
        created_at=parse_timestamp(row.get("created_at")),
    )


class TransaksiRepository:
    """Repository for Transaksi data access operations."""

    def __init__(self, client: Client):
        """
        Initialize the repository with a Supabase client.

        Args:
            client: Supabase client
        """
        self._client = client

    def create(self, txn: Transaksi) -> str:
        """
        Insert a new ledger row.

        Args:
            txn: The Transaksi object to create

        Returns:
            The id assigned by the backend
        """
        now = datetime.now(timezone.utc).isoformat()
        payload = {
            "anggota_id": txn.anggota_id,
            "tabungan_id": txn.tabungan_id,
            "pembiayaan_id": txn.pembiayaan_id,
            "tipe_transaksi": txn.tipe_transaksi,
            "kategori": txn.kategori,
            "deskripsi": txn.deskripsi,
            "reference_number": txn.reference_number,
            "jumlah": txn.jumlah,
            "saldo_sebelum": txn.saldo_sebelum,
            "saldo_sesudah": txn.saldo_sesudah,
            "created_at": txn.created_at.isoformat() if txn.created_at else now,
            "updated_at": now,
        }
        response = execute(self._client.table("transaksi").insert(payload), "insert transaksi")
        return response.data[0]["id"]

    def find_by_id(self, txn_id: str) -> Transaksi | None:
        response = execute(
            self._client.table("transaksi").select("*").eq("id", txn_id).limit(1),
            "fetch transaksi",
        )
        return _to_transaksi(response.data[0]) if response.data else None

    def find_by_anggota(
        self,
        anggota_id: str,
        limit: int | None = None,
        offset: int = 0,
        tipe_transaksi: str | None = None,
    ) -> list[Transaksi]:
        """
        Find a member's transactions, newest first.

        Args:
            anggota_id: The member id
            limit: Page size, or None for every row
            offset: Number of rows to skip
            tipe_transaksi: Optional 'masuk' or 'keluar' filter

        Returns:
            List of transactions ordered by created_at DESC
        """
        query = (
            self._client.table("transaksi")
            .select("*")
            .eq("anggota_id", anggota_id)
            .order("created_at", desc=True)
        )
        if tipe_transaksi:
            query = query.eq("tipe_transaksi", tipe_transaksi)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        response = execute(query, f"fetch transaksi for anggota {anggota_id}")
        return [_to_transaksi(row) for row in response.data]

    def find_by_tabungan(self, tabungan_id: str, limit: int, offset: int = 0) -> list[Transaksi]:
        """Find a page of one savings account's transactions, newest first."""
        response = execute(
            self._client.table("transaksi")
            .select("*")
            .eq("tabungan_id", tabungan_id)
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1),
            f"fetch transaksi for tabungan {tabungan_id}",
        )
        return [_to_transaksi(row) for row in response.data]

    def sum_jumlah(self, anggota_id: str, tipe_transaksi: str) -> float:
        """Sum the amounts of a member's transactions of one direction."""
        response = execute(
            self._client.table("transaksi")
            .select("jumlah")
            .eq("anggota_id", anggota_id)
            .eq("tipe_transaksi", tipe_transaksi),
            f"sum transaksi {tipe_transaksi}",
        )
        return sum(row.get("jumlah") or 0 for row in response.data)
