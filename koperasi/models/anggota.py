"""Member (anggota) and login account (akun) data models."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Anggota:
    """Represents a cooperative member."""

    id: str
    nama: str
    nomor_rekening: str
    saldo: float = 0
    alamat: str | None = None
    kota: str | None = None
    tempat_lahir: str | None = None
    tanggal_lahir: date | None = None
    pekerjaan: str | None = None
    jenis_identitas: str | None = None
    nomor_identitas: str | None = None
    is_active: bool = True
    created_at: datetime | None = None


@dataclass
class Akun:
    """Phone number and PIN pair linked to a member, used for login."""

    id: str
    anggota_id: str | None
    nomor_telepon: str
    pin: str | None = None
    is_active: bool = True
    created_at: datetime | None = None

    @property
    def has_pin(self) -> bool:
        return bool(self.pin)
