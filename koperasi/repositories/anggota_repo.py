"""Member and login account repositories."""

import logging
from datetime import datetime, timezone

from supabase import Client

from koperasi.backend import execute
from koperasi.models.anggota import Akun, Anggota
from koperasi.models.base import parse_date, parse_timestamp

logger = logging.getLogger("koperasi.repositories.anggota")


def _to_anggota(row: dict) -> Anggota:
    return Anggota(
        id=row["id"],
        nama=row["nama"],
        nomor_rekening=row["nomor_rekening"],
        saldo=row.get("saldo") or 0,
        alamat=row.get("alamat"),
        kota=row.get("kota"),
        tempat_lahir=row.get("tempat_lahir"),
        tanggal_lahir=parse_date(row.get("tanggal_lahir")),
        pekerjaan=row.get("pekerjaan"),
        jenis_identitas=row.get("jenis_identitas"),
        nomor_identitas=row.get("nomor_identitas"),
        is_active=row.get("is_active", True),
        created_at=parse_timestamp(row.get("created_at")),
    )


def _to_akun(row: dict) -> Akun:
    return Akun(
        id=row["id"],
        anggota_id=row.get("anggota_id"),
        nomor_telepon=row["nomor_telepon"],
        pin=row.get("pin"),
        is_active=row.get("is_active", True),
        created_at=parse_timestamp(row.get("created_at")),
    )


def _first(response) -> dict | None:
    return response.data[0] if response.data else None


class AnggotaRepository:
    """Repository for the anggota table."""

    def __init__(self, client: Client):
        """
        Initialize the repository with a Supabase client.

        Args:
            client: Supabase client
        """
        self._client = client

    def find_by_id(self, anggota_id: str) -> Anggota | None:
        """
        Find a member by id.

        Returns:
            Anggota object if found, None otherwise
        """
        response = execute(
            self._client.table("anggota").select("*").eq("id", anggota_id).limit(1),
            "fetch anggota",
        )
        row = _first(response)
        return _to_anggota(row) if row else None

    def find_by_name_and_rekening(self, nama: str, nomor_rekening: str) -> Anggota | None:
        """Find a member whose name and account number both match."""
        response = execute(
            self._client.table("anggota")
            .select("*")
            .eq("nama", nama)
            .eq("nomor_rekening", nomor_rekening)
            .limit(1),
            "validate anggota",
        )
        row = _first(response)
        return _to_anggota(row) if row else None


class AkunRepository:
    """Repository for the akun table."""

    def __init__(self, client: Client):
        self._client = client

    def find_active_by_phone(self, nomor_telepon: str) -> Akun | None:
        """
        Find an active login account by phone number.

        Args:
            nomor_telepon: The phone number to search for

        Returns:
            Akun object if found, None otherwise
        """
        response = execute(
            self._client.table("akun")
            .select("*")
            .eq("nomor_telepon", nomor_telepon)
            .eq("is_active", True)
            .limit(1),
            "find akun by phone",
        )
        row = _first(response)
        if row is None:
            logger.info("No account found for phone number %s", nomor_telepon)
            return None
        return _to_akun(row)

    def find_by_id(self, akun_id: str) -> Akun | None:
        response = execute(
            self._client.table("akun").select("*").eq("id", akun_id).limit(1),
            "fetch akun",
        )
        row = _first(response)
        return _to_akun(row) if row else None

    def find_by_anggota(self, anggota_id: str) -> Akun | None:
        response = execute(
            self._client.table("akun").select("*").eq("anggota_id", anggota_id).limit(1),
            "fetch akun by anggota",
        )
        row = _first(response)
        return _to_akun(row) if row else None

    def get_pin(self, akun_id: str) -> str | None:
        """Return the stored PIN for an account, or None."""
        response = execute(
            self._client.table("akun").select("pin").eq("id", akun_id).limit(1),
            "fetch pin",
        )
        row = _first(response)
        return row.get("pin") if row else None

    def create(self, anggota_id: str, nomor_telepon: str) -> Akun:
        """Create a login account for a member."""
        response = execute(
            self._client.table("akun").insert(
                {"anggota_id": anggota_id, "nomor_telepon": nomor_telepon, "is_active": True}
            ),
            "create akun",
        )
        return _to_akun(response.data[0])

    def update_phone(self, akun_id: str, nomor_telepon: str) -> Akun:
        response = execute(
            self._client.table("akun")
            .update({"nomor_telepon": nomor_telepon, "updated_at": _now()})
            .eq("id", akun_id),
            "update akun phone",
        )
        return _to_akun(response.data[0])

    def update_pin(self, akun_id: str, pin: str) -> None:
        execute(
            self._client.table("akun").update({"pin": pin, "updated_at": _now()}).eq("id", akun_id),
            "update pin",
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
