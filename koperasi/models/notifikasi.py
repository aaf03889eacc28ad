"""Notification (notifikasi) data model."""

from dataclasses import dataclass, field
from datetime import datetime

TRANSAKSI = "transaksi"
PENGUMUMAN = "pengumuman"
SISTEM = "sistem"
JATUH_TEMPO = "jatuh_tempo"


@dataclass(frozen=True)
class NotificationTypeInfo:
    """Display and delivery properties of a notification type."""

    name: str
    icon: str
    color: str
    is_push_enabled: bool
    is_global: bool


NOTIFICATION_TYPES = {
    TRANSAKSI: NotificationTypeInfo("Transaksi", "cash-outline", "#28a745", True, False),
    PENGUMUMAN: NotificationTypeInfo("Pengumuman", "megaphone-outline", "#0066CC", False, True),
    SISTEM: NotificationTypeInfo("Sistem", "settings-outline", "#6c757d", False, True),
    JATUH_TEMPO: NotificationTypeInfo("Jatuh Tempo", "calendar-outline", "#dc3545", True, False),
}
DEFAULT_TYPE_INFO = NotificationTypeInfo("Lainnya", "notifications-outline", "#6c757d", False, False)

# Types shown to every member regardless of anggota_id
BROADCAST_TYPES = tuple(jenis for jenis, info in NOTIFICATION_TYPES.items() if info.is_global)

# Extra jenis values that belong under the "transaksi" filter
TRANSACTION_TYPES = (TRANSAKSI, "tabungan_masuk", "tabungan_keluar", "pembiayaan_masuk")

FILTERS = ("all", "unread", TRANSAKSI, PENGUMUMAN, SISTEM, JATUH_TEMPO)


@dataclass
class Notifikasi:
    """Represents a notification row."""

    id: str | None
    anggota_id: str | None
    judul: str
    pesan: str
    jenis: str
    is_read: bool = False
    data: dict | None = None
    created_at: datetime | None = None
    source: str | None = field(default=None, compare=False)

    @property
    def type_info(self) -> NotificationTypeInfo:
        return NOTIFICATION_TYPES.get(self.jenis, DEFAULT_TYPE_INFO)

    @property
    def is_transaction(self) -> bool:
        return self.source == "transaction" or self.jenis in TRANSACTION_TYPES
