"""Ledger transaction (transaksi) data model."""

import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

MASUK = "masuk"
KELUAR = "keluar"

# Channel keyword found in a transfer description -> displayed bank name
TRANSFER_CHANNELS = {
    "BLU": "BLU BY BCA DIGITAL",
    "SHOPEE": "BCA Virtual Account",
    "OVO": "OVO",
    "GOPAY": "GoPay",
    "DANA": "DANA",
}

# Keywords that are also ordinary words ("dana" means funds) need a channel cue
_PLAIN_WORDS = {"DANA"}
_CHANNEL_PATTERNS = {
    keyword: re.compile(
        (r"\b(?:VIA|MELALUI|KE|TOP\s*UP)\s+" if keyword in _PLAIN_WORDS else r"\b") + keyword + r"\b"
    )
    for keyword in TRANSFER_CHANNELS
}

_RECIPIENT_PATTERN = re.compile(r"\bke\s+(.+?)(?:\s+(?:via|melalui)\b|$)", re.IGNORECASE)


@dataclass
class Transaksi:
    """Represents an immutable ledger row."""

    id: str | None
    anggota_id: str
    tipe_transaksi: str
    kategori: str
    jumlah: float
    deskripsi: str = ""
    tabungan_id: str | None = None
    pembiayaan_id: str | None = None
    reference_number: str | None = None
    saldo_sebelum: float | None = None
    saldo_sesudah: float | None = None
    created_at: datetime | None = None
    recipient_name: str | None = field(default=None, compare=False)
    bank_name: str | None = field(default=None, compare=False)

    @property
    def is_masuk(self) -> bool:
        return self.tipe_transaksi == MASUK

    @property
    def signed_jumlah(self) -> float:
        return self.jumlah if self.is_masuk else -self.jumlah

    @classmethod
    def create_mutasi(
        cls,
        anggota_id: str,
        tabungan_id: str,
        tipe_transaksi: str,
        kategori: str,
        jumlah: float,
        saldo_sebelum: float,
        saldo_sesudah: float,
        deskripsi: str,
        prefix: str,
    ) -> "Transaksi":
        """
        Create an unsaved ledger row for a balance change.

        Args:
            anggota_id: Owner of the savings account
            tabungan_id: The savings account being changed
            tipe_transaksi: 'masuk' or 'keluar'
            kategori: Category such as 'setoran' or 'penarikan'
            jumlah: The amount moved
            saldo_sebelum: Balance before the change
            saldo_sesudah: Balance after the change
            deskripsi: Free-text description
            prefix: Reference number prefix, e.g. 'SETOR'

        Returns:
            A new Transaksi with id=None and a '<prefix>-<epoch ms>' reference
        """
        return cls(
            id=None,
            anggota_id=anggota_id,
            tabungan_id=tabungan_id,
            tipe_transaksi=tipe_transaksi,
            kategori=kategori,
            deskripsi=deskripsi,
            reference_number=f"{prefix}-{int(time.time() * 1000)}",
            jumlah=jumlah,
            saldo_sebelum=saldo_sebelum,
            saldo_sesudah=saldo_sesudah,
            created_at=datetime.now(timezone.utc),
        )

    def guess_counterparty(self) -> "Transaksi":
        """Fill recipient and bank names from a transfer's description."""
        if self.kategori != "transfer" or not self.deskripsi:
            return self
        upper = self.deskripsi.upper()
        for keyword, bank in TRANSFER_CHANNELS.items():
            if _CHANNEL_PATTERNS[keyword].search(upper):
                self.bank_name = bank
                break
        match = _RECIPIENT_PATTERN.search(self.deskripsi)
        if match:
            self.recipient_name = match.group(1).strip().upper()
        return self


@dataclass
class TransaksiSummary:
    """Totals of incoming and outgoing money for a member."""

    total_masuk: float = 0
    total_keluar: float = 0
    transaksi_terakhir: Transaksi | None = None

    @property
    def selisih(self) -> float:
        return self.total_masuk - self.total_keluar
