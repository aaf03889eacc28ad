"""Savings account (tabungan) data models."""

from dataclasses import dataclass
from datetime import date, datetime

from koperasi.models.base import round_half_up


@dataclass
class JenisTabungan:
    """A savings product from the static catalog."""

    id: str
    kode: str
    nama: str
    deskripsi: str | None = None
    minimum_setoran: float = 0
    bagi_hasil: float | None = None
    is_active: bool = True


@dataclass
class Tabungan:
    """Represents a member's savings account."""

    id: str
    anggota_id: str
    nomor_rekening: str
    saldo: float
    jenis_tabungan_id: str | None = None
    status: str = "aktif"
    tanggal_buka: date | None = None
    tanggal_jatuh_tempo: date | None = None
    target_saldo: float | None = None
    last_transaction_date: datetime | None = None
    created_at: datetime | None = None
    jenis_tabungan: JenisTabungan | None = None

    @property
    def kode(self) -> str | None:
        return self.jenis_tabungan.kode if self.jenis_tabungan else None

    @property
    def nama(self) -> str:
        if self.jenis_tabungan:
            return self.jenis_tabungan.nama
        return self.nomor_rekening

    @property
    def has_target(self) -> bool:
        return bool(self.target_saldo) and self.target_saldo > 0

    @property
    def progress(self) -> int | None:
        """Percentage of the savings target reached, capped at 100."""
        if not self.has_target:
            return None
        return min(100, round_half_up(self.saldo / self.target_saldo * 100))
