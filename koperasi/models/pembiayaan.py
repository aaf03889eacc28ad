"""Loan (pembiayaan) data model."""

from dataclasses import dataclass
from datetime import datetime

from koperasi.models.base import round_half_up

DIAJUKAN = "diajukan"
DISETUJUI = "disetujui"
DITOLAK = "ditolak"
AKTIF = "aktif"
LUNAS = "lunas"

# status -> (label, color)
PEMBIAYAAN_STATUS = {
    DIAJUKAN: ("Diajukan", "#FFC107"),
    DISETUJUI: ("Disetujui", "#2196F3"),
    DITOLAK: ("Ditolak", "#F44336"),
    AKTIF: ("Aktif", "#4CAF50"),
    LUNAS: ("Lunas", "#9E9E9E"),
}
UNKNOWN_STATUS_COLOR = "#999999"


def status_label(status: str) -> str:
    """Display label of a loan status; unknown statuses are shown as-is."""
    return PEMBIAYAAN_STATUS[status][0] if status in PEMBIAYAAN_STATUS else status


def status_color(status: str) -> str:
    return PEMBIAYAAN_STATUS[status][1] if status in PEMBIAYAAN_STATUS else UNKNOWN_STATUS_COLOR


@dataclass
class Pembiayaan:
    """Represents a member's loan."""

    id: str
    anggota_id: str
    jenis_pinjaman: str
    status: str
    jumlah: float
    jatuh_tempo: datetime | None
    total_pembayaran: float
    sisa_pembayaran: float
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def terbayar(self) -> float:
        return self.total_pembayaran - self.sisa_pembayaran

    @property
    def progress(self) -> int:
        """Percentage of the total payment already paid, within 0..100."""
        if self.status == LUNAS:
            return 100
        if not self.total_pembayaran:
            return 0
        percent = round_half_up(self.terbayar / self.total_pembayaran * 100)
        return max(0, min(100, percent))

    @property
    def status_label(self) -> str:
        return status_label(self.status)

    @property
    def status_color(self) -> str:
        return status_color(self.status)
