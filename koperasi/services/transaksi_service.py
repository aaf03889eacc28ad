"""Transaction history and summaries."""

import logging

from koperasi.models.exceptions import BackendError, TransactionFailedError
from koperasi.models.transaksi import KELUAR, MASUK, Transaksi, TransaksiSummary
from koperasi.repositories.transaksi_repo import TransaksiRepository

logger = logging.getLogger("koperasi.services.transaksi")


class TransaksiService:
    """Service layer for ledger rows."""

    def __init__(self, transaksi_repo: TransaksiRepository):
        self._transaksi_repo = transaksi_repo

    def get_transaksi_by_id(self, transaksi_id: str) -> Transaksi | None:
        try:
            txn = self._transaksi_repo.find_by_id(transaksi_id)
        except BackendError:
            return None
        return txn.guess_counterparty() if txn else None

    def get_transaksi_by_anggota(
        self,
        anggota_id: str,
        limit: int | None = 10,
        offset: int = 0,
        tipe_transaksi: str | None = None,
    ) -> list[Transaksi]:
        """
        Get a page of a member's transactions, newest first.

        Failures are logged and yield an empty list.
        """
        try:
            rows = self._transaksi_repo.find_by_anggota(anggota_id, limit, offset, tipe_transaksi)
        except BackendError:
            return []
        return self.with_counterparty(rows)

    def create_transaksi(self, transaksi: Transaksi) -> str:
        """
        Record a ledger row. Notifications for it are created by the backend.

        Returns:
            The new transaction id

        Raises:
            TransactionFailedError: If the insert fails
        """
        try:
            return self._transaksi_repo.create(transaksi)
        except BackendError as err:
            raise TransactionFailedError(f"Gagal membuat transaksi: {err}") from err

    def get_transaksi_summary(self, anggota_id: str) -> TransaksiSummary:
        """Totals of incoming and outgoing money plus the latest row; zeros on failure."""
        try:
            total_masuk = self._transaksi_repo.sum_jumlah(anggota_id, MASUK)
            total_keluar = self._transaksi_repo.sum_jumlah(anggota_id, KELUAR)
        except BackendError:
            logger.error("Error getting transaction summary for %s", anggota_id)
            return TransaksiSummary()

        try:
            latest = self._transaksi_repo.find_by_anggota(anggota_id, limit=1)
        except BackendError:
            latest = []
        return TransaksiSummary(
            total_masuk=total_masuk,
            total_keluar=total_keluar,
            transaksi_terakhir=latest[0] if latest else None,
        )

    @staticmethod
    def with_counterparty(rows: list[Transaksi]) -> list[Transaksi]:
        """Fill recipient and bank names for transfers."""
        return [row.guess_counterparty() for row in rows]
