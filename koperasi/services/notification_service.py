"""Notification queries, read status and filtering."""

import logging

from koperasi.models.exceptions import BackendError
from koperasi.models.notifikasi import (
    BROADCAST_TYPES,
    DEFAULT_TYPE_INFO,
    FILTERS,
    JATUH_TEMPO,
    NOTIFICATION_TYPES,
    TRANSAKSI,
    NotificationTypeInfo,
    Notifikasi,
)
from koperasi.repositories.notifikasi_repo import NotifikasiRepository

logger = logging.getLogger("koperasi.services.notification")


class NotificationService:
    """Service layer for notifications."""

    def __init__(self, notifikasi_repo: NotifikasiRepository):
        self._notifikasi_repo = notifikasi_repo

    def create_notification(
        self,
        anggota_id: str | None,
        judul: str,
        pesan: str,
        jenis: str,
        data: dict | None = None,
        is_read: bool = False,
    ) -> bool:
        """Create a notification. Returns False if the insert fails."""
        try:
            self._notifikasi_repo.create(
                Notifikasi(
                    id=None,
                    anggota_id=anggota_id,
                    judul=judul,
                    pesan=pesan,
                    jenis=jenis,
                    is_read=is_read,
                    data=data,
                )
            )
        except BackendError:
            return False
        logger.debug("Notification '%s' created for %s", judul, anggota_id)
        return True

    def get_notifications(self, anggota_id: str, limit: int = 50) -> list[Notifikasi]:
        """
        Get the member's own notifications plus broadcast ones, newest first.

        Args:
            anggota_id: The member id
            limit: Maximum number of notifications returned

        Raises:
            BackendError: If either query fails
        """
        own = self._notifikasi_repo.find_by_anggota(anggota_id, limit)
        broadcast = self._notifikasi_repo.find_by_types(BROADCAST_TYPES, limit)

        merged = {}
        for item in own + broadcast:
            merged.setdefault(item.id, item)
        rows = sorted(
            merged.values(),
            key=lambda n: n.created_at.timestamp() if n.created_at else 0,
            reverse=True,
        )
        return rows[:limit]

    def get_notifications_by_type(self, anggota_id: str, jenis: str, limit: int = 20) -> list[Notifikasi]:
        """
        Get one type of the member's notifications.

        Raises:
            BackendError: If the query fails
        """
        return self._notifikasi_repo.find_by_anggota_and_type(anggota_id, jenis, limit=limit)

    @staticmethod
    def get_notification_type_info(jenis: str) -> NotificationTypeInfo:
        return NOTIFICATION_TYPES.get(jenis, DEFAULT_TYPE_INFO)

    def get_unread_count(self, anggota_id: str) -> int:
        try:
            return self._notifikasi_repo.count_unread(anggota_id)
        except BackendError:
            return 0

    def mark_as_read(self, notifikasi_id: str) -> bool:
        logger.info("Marking notification %s as read", notifikasi_id)
        try:
            self._notifikasi_repo.mark_read(notifikasi_id)
        except BackendError:
            return False
        return True

    def mark_all_as_read(self, anggota_id: str) -> bool:
        logger.info("Marking all notifications of %s as read", anggota_id)
        try:
            self._notifikasi_repo.mark_all_read(anggota_id)
        except BackendError:
            return False
        return True

    def get_jatuh_tempo_notifications(self, anggota_id: str) -> list[Notifikasi]:
        """
        Get due-date notifications, preferring the stored procedure.

        An empty or failed procedure call falls back to a direct query.

        Raises:
            BackendError: If the fallback query fails too
        """
        try:
            rows = self._notifikasi_repo.find_jatuh_tempo(anggota_id)
        except BackendError:
            rows = []
        if rows:
            logger.info("Found %d jatuh tempo notifications via rpc", len(rows))
            return rows

        logger.debug("Jatuh tempo rpc returned nothing, using direct query")
        return self._notifikasi_repo.find_by_anggota_and_type(anggota_id, JATUH_TEMPO)

    @staticmethod
    def filter_notifications(rows: list[Notifikasi], active_filter: str) -> list[Notifikasi]:
        """
        Apply a list filter: all, unread, or a notification type.

        The 'transaksi' filter also matches the per-product transaction types.

        Raises:
            ValueError: If the filter is unknown
        """
        if active_filter not in FILTERS:
            raise ValueError(f"Unknown notification filter: {active_filter}")
        if active_filter == "all":
            return list(rows)
        if active_filter == "unread":
            return [n for n in rows if not n.is_read]
        if active_filter == TRANSAKSI:
            return [n for n in rows if n.is_transaction]
        return [n for n in rows if n.jenis == active_filter]
