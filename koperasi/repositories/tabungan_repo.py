"""Savings account and savings type repositories."""

from datetime import date, datetime, timezone

from supabase import Client

from koperasi.backend import call, execute, remote_transaction
from koperasi.models.base import parse_date, parse_timestamp
from koperasi.models.tabungan import JenisTabungan, Tabungan

TABUNGAN_WITH_JENIS = "*, jenis_tabungan:jenis_tabungan_id(*)"


def _to_jenis(row: dict) -> JenisTabungan:
    return JenisTabungan(
        id=row["id"],
        kode=row["kode"],
        nama=row["nama"],
        deskripsi=row.get("deskripsi"),
        minimum_setoran=row.get("minimum_setoran") or 0,
        bagi_hasil=row.get("bagi_hasil"),
        is_active=row.get("is_active", True),
    )


def _to_tabungan(row: dict) -> Tabungan:
    jenis = row.get("jenis_tabungan")
    return Tabungan(
        id=row["id"],
        anggota_id=row["anggota_id"],
        nomor_rekening=row.get("nomor_rekening") or "",
        saldo=row.get("saldo") or 0,
        jenis_tabungan_id=row.get("jenis_tabungan_id"),
        status=row.get("status") or "aktif",
        tanggal_buka=parse_date(row.get("tanggal_buka")),
        tanggal_jatuh_tempo=parse_date(row.get("tanggal_jatuh_tempo")),
        target_saldo=row.get("target_saldo"),
        last_transaction_date=parse_timestamp(row.get("last_transaction_date")),
        created_at=parse_timestamp(row.get("created_at")),
        jenis_tabungan=_to_jenis(jenis) if isinstance(jenis, dict) else None,
    )


class JenisTabunganRepository:
    """Repository for the jenis_tabungan catalog."""

    def __init__(self, client: Client):
        self._client = client

    def find_active(self) -> list[JenisTabungan]:
        """Return active savings types ordered by name."""
        response = execute(
            self._client.table("jenis_tabungan").select("*").eq("is_active", True).order("nama"),
            "fetch jenis tabungan",
        )
        return [_to_jenis(row) for row in response.data]

    def find_by_kode(self, kode: str) -> JenisTabungan | None:
        response = execute(
            self._client.table("jenis_tabungan").select("*").eq("kode", kode).limit(1),
            f"fetch jenis tabungan {kode}",
        )
        return _to_jenis(response.data[0]) if response.data else None


class TabunganRepository:
    """Repository for the tabungan table."""

    def __init__(self, client: Client):
        """
        Initialize the repository with a Supabase client.

        Args:
            client: Supabase client
        """
        self._client = client

    def transaction(self):
        """Bracket writes in the backend's begin/commit/rollback procedures."""
        return remote_transaction(self._client)

    def find_by_anggota(self, anggota_id: str) -> list[Tabungan]:
        """
        Find all savings accounts of a member, with their savings type.

        Args:
            anggota_id: The member id

        Returns:
            List of Tabungan in backend order
        """
        response = execute(
            self._client.table("tabungan").select(TABUNGAN_WITH_JENIS).eq("anggota_id", anggota_id),
            f"fetch tabungan for anggota {anggota_id}",
        )
        return [_to_tabungan(row) for row in response.data]

    def find_by_id(self, tabungan_id: str) -> Tabungan | None:
        response = execute(
            self._client.table("tabungan").select(TABUNGAN_WITH_JENIS).eq("id", tabungan_id).limit(1),
            f"fetch tabungan {tabungan_id}",
        )
        return _to_tabungan(response.data[0]) if response.data else None

    def find_latest_by_anggota(self, anggota_id: str) -> Tabungan | None:
        """Return the most recently created savings account of a member."""
        response = execute(
            self._client.table("tabungan")
            .select("*")
            .eq("anggota_id", anggota_id)
            .order("created_at", desc=True)
            .limit(1),
            "fetch newest tabungan",
        )
        return _to_tabungan(response.data[0]) if response.data else None

    def get_saldo(self, tabungan_id: str) -> float | None:
        """
        Read the current balance of a savings account.

        Returns:
            The balance, or None if the account does not exist
        """
        response = execute(
            self._client.table("tabungan").select("saldo").eq("id", tabungan_id).limit(1),
            "fetch saldo tabungan",
        )
        if not response.data:
            return None
        return response.data[0].get("saldo") or 0

    def update_saldo(self, tabungan_id: str, saldo: float) -> None:
        """
        Overwrite the balance of a savings account.

        Args:
            tabungan_id: The savings account to update
            saldo: The new balance
        """
        now = datetime.now(timezone.utc).isoformat()
        execute(
            self._client.table("tabungan")
            .update({"saldo": saldo, "updated_at": now, "last_transaction_date": now})
            .eq("id", tabungan_id),
            "update saldo tabungan",
        )

    def open(
        self,
        anggota_id: str,
        jenis_kode: str,
        setoran_awal: float,
        tanggal_jatuh_tempo: date | None = None,
    ):
        """Open a savings account through the buka_tabungan procedure."""
        return call(
            self._client,
            "buka_tabungan",
            {
                "p_anggota_id": anggota_id,
                "p_jenis_kode": jenis_kode,
                "p_setoran_awal": setoran_awal,
                "p_tanggal_jatuh_tempo": tanggal_jatuh_tempo.isoformat() if tanggal_jatuh_tempo else None,
            },
        )
