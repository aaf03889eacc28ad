"""Cached member data shared by all commands."""

import logging

from koperasi.context.query_cache import QueryCache
from koperasi.models.notifikasi import FILTERS, Notifikasi
from koperasi.models.pembiayaan import Pembiayaan
from koperasi.models.tabungan import JenisTabungan, Tabungan
from koperasi.models.transaksi import Transaksi, TransaksiSummary
from koperasi.services.loan_notification_service import LoanNotificationService
from koperasi.services.notification_service import NotificationService
from koperasi.services.pembiayaan_service import PembiayaanService
from koperasi.services.tabungan_service import TabunganService
from koperasi.services.transaksi_service import TransaksiService
from koperasi.storage import SessionStorage

logger = logging.getLogger("koperasi.context.data")

FILTER_PREFERENCE_KEY = "notification_filter_preference"


class DataContext:
    """
    Transactions, notifications and account data per member, cached in a
    QueryCache. Cache keys start with the member id so a member's data can
    be dropped in one call.
    """

    def __init__(
        self,
        cache: QueryCache,
        transaksi_service: TransaksiService,
        notification_service: NotificationService,
        loan_notification_service: LoanNotificationService,
        tabungan_service: TabunganService,
        pembiayaan_service: PembiayaanService,
        storage: SessionStorage,
        transaction_limit: int = 10,
        notification_limit: int = 50,
    ):
        self._cache = cache
        self._transaksi_service = transaksi_service
        self._notification_service = notification_service
        self._loan_notification_service = loan_notification_service
        self._tabungan_service = tabungan_service
        self._pembiayaan_service = pembiayaan_service
        self._storage = storage
        self._transaction_limit = transaction_limit
        self._notification_limit = notification_limit
        self._loan_checked: set[str] = set()

    def fetch_transactions(self, anggota_id: str, force: bool = False) -> list[Transaksi]:
        """Latest transactions of a member; an empty cached list is always refetched."""
        return self._cache.fetch(
            f"{anggota_id}:transactions",
            lambda: self._transaksi_service.get_transaksi_by_anggota(anggota_id, self._transaction_limit),
            force=force,
            keep_empty=False,
        )

    def _load_notifications(self, anggota_id: str) -> list[Notifikasi]:
        rows = self._notification_service.get_notifications(anggota_id, self._notification_limit)
        seen = {n.id for n in rows}
        jatuh_tempo = self._notification_service.get_jatuh_tempo_notifications(anggota_id)
        rows.extend(n for n in jatuh_tempo if n.id not in seen)
        rows.sort(key=lambda n: n.created_at.timestamp() if n.created_at else 0, reverse=True)
        logger.debug("Loaded %d notifications for %s", len(rows), anggota_id)
        return rows

    def fetch_notifications(self, anggota_id: str, force: bool = False) -> list[Notifikasi]:
        """
        Member, broadcast and due-date notifications, newest first.

        The first load for a member runs the loan installment check before
        fetching, so fresh reminders are included.

        Raises:
            BackendError: If the notifications cannot be fetched
        """
        if anggota_id not in self._loan_checked:
            self._loan_checked.add(anggota_id)
            self._loan_notification_service.check_member_loan_installments(anggota_id)
            force = True
        return self._cache.fetch(
            f"{anggota_id}:notifications",
            lambda: self._load_notifications(anggota_id),
            force=force,
            keep_empty=False,
        )

    def unread_count(self, anggota_id: str) -> int:
        cached = self._cache.get(f"{anggota_id}:notifications")
        if cached is not None:
            return sum(1 for n in cached if not n.is_read)
        return self._notification_service.get_unread_count(anggota_id)

    def mark_notification_as_read(self, anggota_id: str, notifikasi_id: str) -> bool:
        """
        Mark one notification read. The cached copy is updated even if the
        server update fails.
        """
        success = self._notification_service.mark_as_read(notifikasi_id)
        for notifikasi in self._cache.get(f"{anggota_id}:notifications") or []:
            if notifikasi.id == notifikasi_id:
                notifikasi.is_read = True
        return success

    def mark_all_notifications_as_read(self, anggota_id: str) -> bool:
        success = self._notification_service.mark_all_as_read(anggota_id)
        if success:
            for notifikasi in self._cache.get(f"{anggota_id}:notifications") or []:
                if notifikasi.anggota_id == anggota_id:
                    notifikasi.is_read = True
        return success

    def fetch_tabungan(self, anggota_id: str, force: bool = False) -> list[Tabungan]:
        return self._cache.fetch(
            f"{anggota_id}:tabungan",
            lambda: self._tabungan_service.get_tabungan_by_anggota(anggota_id),
            force=force,
        )

    def fetch_jenis_tabungan(self, force: bool = False) -> list[JenisTabungan]:
        return self._cache.fetch("jenis_tabungan", self._tabungan_service.get_jenis_tabungan, force=force)

    def fetch_pembiayaan(self, anggota_id: str, force: bool = False) -> list[Pembiayaan]:
        return self._cache.fetch(
            f"{anggota_id}:pembiayaan",
            lambda: self._pembiayaan_service.get_pembiayaan_by_anggota(anggota_id),
            force=force,
        )

    def fetch_summary(self, anggota_id: str, force: bool = False) -> TransaksiSummary:
        return self._cache.fetch(
            f"{anggota_id}:summary",
            lambda: self._transaksi_service.get_transaksi_summary(anggota_id),
            force=force,
        )

    def invalidate_balances(self, anggota_id: str) -> None:
        """Drop data that changes when money moves."""
        for name in ("tabungan", "transactions", "summary"):
            self._cache.invalidate(f"{anggota_id}:{name}")

    def clear_cache(self, anggota_id: str | None = None) -> None:
        """Forget one member's cached data, or everything."""
        if anggota_id is None:
            self._cache.clear()
            self._loan_checked.clear()
            return
        self._cache.invalidate(f"{anggota_id}:")
        self._loan_checked.discard(anggota_id)

    def get_notification_filter(self, owner: str) -> str:
        value = self._storage.get_item(owner, FILTER_PREFERENCE_KEY)
        return value if value in FILTERS else "all"

    def set_notification_filter(self, owner: str, active_filter: str) -> None:
        """
        Remember the owner's notification filter.

        Raises:
            ValueError: If the filter is unknown
        """
        if active_filter not in FILTERS:
            raise ValueError(f"Unknown notification filter: {active_filter}")
        self._storage.set_item(owner, FILTER_PREFERENCE_KEY, active_filter)
