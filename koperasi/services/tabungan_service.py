"""Savings account (tabungan) business logic."""

import logging
from dataclasses import dataclass
from datetime import date

from koperasi.formatting import format_currency
from koperasi.models.exceptions import (
    BackendError,
    InsufficientBalanceError,
    InvalidAmountError,
    KoperasiError,
    TabunganNotFoundError,
    TransactionFailedError,
)
from koperasi.models.tabungan import JenisTabungan, Tabungan
from koperasi.models.transaksi import KELUAR, MASUK, Transaksi
from koperasi.repositories.tabungan_repo import JenisTabunganRepository, TabunganRepository
from koperasi.repositories.transaksi_repo import TransaksiRepository

logger = logging.getLogger("koperasi.services.tabungan")


@dataclass
class BukaTabunganResult:
    """Outcome of opening a savings account."""

    message: str
    tabungan_id: str | None = None
    nomor_rekening: str | None = None


class TabunganService:
    """Service layer for savings accounts."""

    def __init__(
        self,
        jenis_repo: JenisTabunganRepository,
        tabungan_repo: TabunganRepository,
        transaksi_repo: TransaksiRepository,
    ):
        """
        Initialize the TabunganService with repositories.

        Args:
            jenis_repo: Repository for savings types
            tabungan_repo: Repository for savings accounts
            transaksi_repo: Repository for ledger rows
        """
        self._jenis_repo = jenis_repo
        self._tabungan_repo = tabungan_repo
        self._transaksi_repo = transaksi_repo

    def get_jenis_tabungan(self) -> list[JenisTabungan]:
        """
        Get all active savings types.

        Raises:
            BackendError: If the catalog cannot be fetched
        """
        return self._jenis_repo.find_active()

    def get_jenis_tabungan_by_kode(self, kode: str) -> JenisTabungan | None:
        try:
            return self._jenis_repo.find_by_kode(kode)
        except BackendError:
            return None

    def get_tabungan_by_anggota(self, anggota_id: str) -> list[Tabungan]:
        """
        Get every savings account of a member.

        Raises:
            BackendError: If the accounts cannot be fetched
        """
        return self._tabungan_repo.find_by_anggota(anggota_id)

    def get_tabungan_by_id(self, tabungan_id: str) -> Tabungan | None:
        try:
            return self._tabungan_repo.find_by_id(tabungan_id)
        except BackendError:
            return None

    def buka_tabungan(
        self,
        anggota_id: str,
        jenis_kode: str,
        setoran_awal: float = 0,
        tanggal_jatuh_tempo: date | None = None,
    ) -> BukaTabunganResult:
        """
        Open a new savings account for a member.

        Args:
            anggota_id: The member opening the account
            jenis_kode: Code of the savings type, e.g. 'SIBAROKAH'
            setoran_awal: Initial deposit, at least the type's minimum
            tanggal_jatuh_tempo: Optional maturity date

        Returns:
            BukaTabunganResult with the new account's id and number when
            they could be read back

        Raises:
            InvalidAmountError: If the initial deposit is negative or below minimum
            TransactionFailedError: If the backend refuses to open the account
        """
        if setoran_awal < 0:
            raise InvalidAmountError("Setoran awal tidak boleh negatif")

        jenis = self.get_jenis_tabungan_by_kode(jenis_kode)
        if jenis is not None and setoran_awal < jenis.minimum_setoran:
            raise InvalidAmountError(
                f"Setoran awal harus minimal {format_currency(jenis.minimum_setoran)}"
            )

        try:
            self._tabungan_repo.open(anggota_id, jenis_kode, setoran_awal, tanggal_jatuh_tempo)
        except BackendError as err:
            logger.error("Error opening tabungan %s for %s: %s", jenis_kode, anggota_id, err)
            raise TransactionFailedError(str(err) or "Gagal membuka rekening tabungan") from err

        try:
            tabungan = self._tabungan_repo.find_latest_by_anggota(anggota_id)
        except BackendError:
            tabungan = None
        if tabungan is None:
            return BukaTabunganResult(
                message="Rekening tabungan berhasil dibuka, tetapi gagal mendapatkan detailnya"
            )

        logger.info("Opened tabungan %s for anggota %s", tabungan.id, anggota_id)
        return BukaTabunganResult(
            message="Rekening tabungan berhasil dibuka",
            tabungan_id=tabungan.id,
            nomor_rekening=tabungan.nomor_rekening,
        )

    def _get_saldo(self, tabungan_id: str) -> float:
        try:
            saldo = self._tabungan_repo.get_saldo(tabungan_id)
        except BackendError as err:
            raise TransactionFailedError("Gagal mendapatkan saldo tabungan") from err
        if saldo is None:
            raise TabunganNotFoundError(f"Tabungan {tabungan_id} tidak ditemukan")
        return saldo

    def _validate_jumlah(self, jumlah: float, action: str) -> None:
        if jumlah < 0:
            raise InvalidAmountError(f"Jumlah {action} tidak boleh negatif: {jumlah}")
        if jumlah == 0:
            raise InvalidAmountError(f"Jumlah {action} harus lebih dari nol")

    def _mutasi(self, txn: Transaksi, failure_message: str) -> Transaksi:
        """Update the balance and record the ledger row inside one remote transaction."""
        try:
            with self._tabungan_repo.transaction():
                self._tabungan_repo.update_saldo(txn.tabungan_id, txn.saldo_sesudah)
                txn.id = self._transaksi_repo.create(txn)
        except TransactionFailedError:
            raise
        except KoperasiError as err:
            logger.error("Error in %s transaction for tabungan %s: %s", txn.kategori, txn.tabungan_id, err)
            raise TransactionFailedError(failure_message) from err
        return txn

    def setor_tabungan(
        self,
        tabungan_id: str,
        anggota_id: str,
        jumlah: float,
        deskripsi: str = "Setoran tabungan",
    ) -> Transaksi:
        """
        Deposit into a savings account.

        Args:
            tabungan_id: The savings account to deposit to
            anggota_id: Owner of the account
            jumlah: The amount to deposit (must be positive)
            deskripsi: Ledger description

        Returns:
            The recorded Transaksi

        Raises:
            InvalidAmountError: If the amount is zero or negative
            TabunganNotFoundError: If the account doesn't exist
            TransactionFailedError: If any remote step fails
        """
        self._validate_jumlah(jumlah, "setoran")
        saldo_sebelum = self._get_saldo(tabungan_id)

        txn = Transaksi.create_mutasi(
            anggota_id=anggota_id,
            tabungan_id=tabungan_id,
            tipe_transaksi=MASUK,
            kategori="setoran",
            jumlah=jumlah,
            saldo_sebelum=saldo_sebelum,
            saldo_sesudah=saldo_sebelum + jumlah,
            deskripsi=deskripsi,
            prefix="SETOR",
        )
        txn = self._mutasi(txn, "Gagal melakukan setoran")
        logger.info("Setoran %s to tabungan %s recorded as %s", jumlah, tabungan_id, txn.id)
        return txn

    def tarik_tabungan(
        self,
        tabungan_id: str,
        anggota_id: str,
        jumlah: float,
        deskripsi: str = "Penarikan tabungan",
    ) -> Transaksi:
        """
        Withdraw from a savings account.

        The balance check happens on the client before the remote
        transaction starts.

        Returns:
            The recorded Transaksi

        Raises:
            InvalidAmountError: If the amount is zero or negative
            TabunganNotFoundError: If the account doesn't exist
            InsufficientBalanceError: If the balance is below the amount
            TransactionFailedError: If any remote step fails
        """
        self._validate_jumlah(jumlah, "penarikan")
        saldo_sebelum = self._get_saldo(tabungan_id)

        if saldo_sebelum < jumlah:
            raise InsufficientBalanceError("Saldo tidak mencukupi untuk melakukan penarikan")

        txn = Transaksi.create_mutasi(
            anggota_id=anggota_id,
            tabungan_id=tabungan_id,
            tipe_transaksi=KELUAR,
            kategori="penarikan",
            jumlah=jumlah,
            saldo_sebelum=saldo_sebelum,
            saldo_sesudah=saldo_sebelum - jumlah,
            deskripsi=deskripsi,
            prefix="TARIK",
        )
        txn = self._mutasi(txn, "Gagal melakukan penarikan")
        logger.info("Penarikan %s from tabungan %s recorded as %s", jumlah, tabungan_id, txn.id)
        return txn

    def get_riwayat_transaksi(self, tabungan_id: str, limit: int = 10, offset: int = 0) -> list[Transaksi]:
        """
        Get a page of a savings account's history, newest first.

        Raises:
            BackendError: If the history cannot be fetched
        """
        return self._transaksi_repo.find_by_tabungan(tabungan_id, limit, offset)
