"""Loan (pembiayaan) queries and display helpers."""

import logging
import re

from koperasi.models.exceptions import BackendError
from koperasi.models.pembiayaan import Pembiayaan, status_color, status_label
from koperasi.repositories.pembiayaan_repo import PembiayaanRepository

logger = logging.getLogger("koperasi.services.pembiayaan")

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class PembiayaanService:
    """Service layer for loans."""

    def __init__(self, pembiayaan_repo: PembiayaanRepository):
        self._pembiayaan_repo = pembiayaan_repo

    def get_pembiayaan_by_anggota(self, anggota_id: str) -> list[Pembiayaan]:
        """
        Get all loans of a member, newest first.

        Raises:
            BackendError: If the loans cannot be fetched
        """
        rows = self._pembiayaan_repo.find_by_anggota(anggota_id)
        logger.debug("Fetched %d pembiayaan records for %s", len(rows), anggota_id)
        return rows

    def get_pembiayaan_by_id(self, pembiayaan_id: str) -> Pembiayaan | None:
        """Get one loan; malformed ids and backend failures give None."""
        if not UUID_PATTERN.match(pembiayaan_id):
            logger.error("Invalid pembiayaan id format: %s", pembiayaan_id)
            return None
        try:
            return self._pembiayaan_repo.find_by_id(pembiayaan_id)
        except BackendError:
            return None

    def get_pembiayaan_history(self, anggota_id: str) -> list[Pembiayaan]:
        """
        Get settled and rejected loans of a member.

        Raises:
            BackendError: If the history cannot be fetched
        """
        return self._pembiayaan_repo.find_history(anggota_id)

    @staticmethod
    def calculate_progress(pembiayaan: Pembiayaan) -> int:
        return pembiayaan.progress

    @staticmethod
    def get_status_label(status: str) -> str:
        return status_label(status)

    @staticmethod
    def get_status_color(status: str) -> str:
        return status_color(status)
