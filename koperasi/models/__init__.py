"""Data models for the koperasi client."""

from .anggota import Akun, Anggota
from .tabungan import JenisTabungan, Tabungan
from .transaksi import Transaksi, TransaksiSummary
from .pembiayaan import Pembiayaan
from .notifikasi import Notifikasi, NotificationTypeInfo
from .exceptions import (
    KoperasiError,
    AccountNotFoundError,
    InvalidPinError,
    NotAuthenticatedError,
    InvalidAmountError,
    InsufficientBalanceError,
    TabunganNotFoundError,
    PembiayaanNotFoundError,
    TransactionFailedError,
    BackendError,
)

__all__ = [
    "Akun",
    "Anggota",
    "JenisTabungan",
    "Tabungan",
    "Transaksi",
    "TransaksiSummary",
    "Pembiayaan",
    "Notifikasi",
    "NotificationTypeInfo",
    "KoperasiError",
    "AccountNotFoundError",
    "InvalidPinError",
    "NotAuthenticatedError",
    "InvalidAmountError",
    "InsufficientBalanceError",
    "TabunganNotFoundError",
    "PembiayaanNotFoundError",
    "TransactionFailedError",
    "BackendError",
]
