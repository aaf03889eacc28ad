"""Due-date reminders for loan installments."""

import logging
import math
from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

from koperasi.formatting import WIB, format_date
from koperasi.models.base import round_half_up
from koperasi.models.exceptions import BackendError
from koperasi.models.notifikasi import JATUH_TEMPO
from koperasi.models.pembiayaan import Pembiayaan
from koperasi.repositories.notifikasi_repo import NotifikasiRepository
from koperasi.repositories.pembiayaan_repo import PembiayaanRepository
from koperasi.services.notification_service import NotificationService

logger = logging.getLogger("koperasi.services.loan_notification")

DUPLICATE_WINDOW = timedelta(days=3)


def loan_term_months(loan: Pembiayaan) -> int:
    """Number of calendar months between the loan's start and its final due date."""
    if loan.created_at is None or loan.jatuh_tempo is None:
        return 0
    start = loan.created_at.astimezone(WIB)
    due = loan.jatuh_tempo.astimezone(WIB)
    return (due.year - start.year) * 12 + (due.month - start.month)


def installment_dates(loan: Pembiayaan) -> list[datetime]:
    """
    Monthly installment dates, one month apart starting a month after creation.

    Dates are counted in WIB, like the term. Days past the end of a shorter
    month are clamped to its last day.
    """
    if loan.created_at is None:
        return []
    start = loan.created_at.astimezone(WIB)
    return [start + relativedelta(months=i) for i in range(1, loan_term_months(loan) + 1)]


def iso_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a 'Z' suffix: '2026-10-17T03:00:00.000Z'."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LoanNotificationService:
    """Creates 'jatuh_tempo' notifications for upcoming loan installments."""

    def __init__(
        self,
        pembiayaan_repo: PembiayaanRepository,
        notifikasi_repo: NotifikasiRepository,
        notification_service: NotificationService,
        window_days: int = 3,
    ):
        """
        Initialize the service.

        Args:
            pembiayaan_repo: Repository for loans
            notifikasi_repo: Repository used to look up earlier reminders
            notification_service: Service that writes the reminders
            window_days: How many days ahead an installment counts as upcoming
        """
        self._pembiayaan_repo = pembiayaan_repo
        self._notifikasi_repo = notifikasi_repo
        self._notification_service = notification_service
        self._window = timedelta(days=window_days)

    def check_and_create_due_date_notifications(self, now: datetime | None = None) -> None:
        """Check every active loan. Meant to run once a day."""
        logger.info("Checking for upcoming loan installments")
        try:
            loans = self._pembiayaan_repo.find_active()
        except BackendError:
            logger.error("Error fetching active loans")
            return
        self._process_all(loans, now)
        logger.info("Finished checking for upcoming loan installments")

    def check_member_loan_installments(self, anggota_id: str, now: datetime | None = None) -> None:
        logger.info("Checking loan installments for member %s", anggota_id)
        try:
            loans = self._pembiayaan_repo.find_active(anggota_id)
        except BackendError:
            logger.error("Error fetching loans for member %s", anggota_id)
            return
        self._process_all(loans, now)

    def _process_all(self, loans: list[Pembiayaan], now: datetime | None) -> None:
        if not loans:
            logger.info("No active loans found")
            return
        logger.info("Found %d active loans", len(loans))
        now = now or datetime.now(timezone.utc)
        for loan in loans:
            self.process_loan_installments(loan, now)

    def _notified_dates(self, loan: Pembiayaan, now: datetime) -> set[str] | None:
        """Installment dates already reminded about for this loan in the last few days."""
        try:
            existing = self._notifikasi_repo.find_by_anggota_and_type(
                loan.anggota_id, JATUH_TEMPO, since=now - DUPLICATE_WINDOW
            )
        except BackendError:
            logger.error("Error checking existing notifications for loan %s", loan.id)
            return None
        return {
            n.data.get("installmentDate")
            for n in existing
            if n.data and n.data.get("loanId") == loan.id
        }

    def process_loan_installments(self, loan: Pembiayaan, now: datetime) -> None:
        """
        Create at most the due reminders for one loan.

        An installment due today takes precedence over upcoming ones. Failures
        are logged and the loan is skipped.
        """
        term = loan_term_months(loan)
        if term <= 0:
            logger.warning("Loan %s has no installment term, skipping", loan.id)
            return

        dates = installment_dates(loan)
        upcoming = [d for d in dates if now <= d <= now + self._window]
        today = now.astimezone(WIB).date()
        due_today = next((d for d in dates if d.astimezone(WIB).date() == today), None)
        logger.debug(
            "Loan %s: %d installments, %d upcoming, due today: %s",
            loan.id, len(dates), len(upcoming), due_today is not None,
        )
        if not upcoming and due_today is None:
            return

        notified = self._notified_dates(loan, now)
        if notified is None:
            return

        if due_today is not None and iso_timestamp(due_today) not in notified:
            self.create_due_date_notification(
                loan,
                due_today,
                "Pembayaran Angsuran Hari Ini",
                f"Pembayaran angsuran pinjaman {loan.jenis_pinjaman} jatuh tempo hari ini. "
                "Silakan lakukan pembayaran secepatnya.",
            )
            return

        for installment in upcoming:
            if iso_timestamp(installment) in notified:
                continue
            days_until = math.ceil((installment - now) / timedelta(days=1))
            self.create_due_date_notification(
                loan,
                installment,
                "Pengingat Pembayaran Angsuran",
                f"Pembayaran angsuran pinjaman {loan.jenis_pinjaman} akan jatuh tempo dalam "
                f"{days_until} hari. Silakan siapkan pembayaran Anda.",
            )

    def create_due_date_notification(
        self,
        loan: Pembiayaan,
        installment_date: datetime,
        title: str,
        message: str,
    ) -> bool:
        """
        Write one reminder for a loan installment.

        Args:
            loan: The loan the installment belongs to
            installment_date: When the installment is due
            title: Notification title
            message: Notification body; the formatted date is appended

        Returns:
            True if the notification was stored
        """
        term = loan_term_months(loan)
        payload = {
            "loanId": loan.id,
            "installmentDate": iso_timestamp(installment_date),
            "installmentAmount": round_half_up(loan.total_pembayaran / term) if term > 0 else 0,
            "loanType": loan.jenis_pinjaman,
            "totalPayment": loan.total_pembayaran,
            "remainingPayment": loan.sisa_pembayaran,
        }
        success = self._notification_service.create_notification(
            anggota_id=loan.anggota_id,
            judul=title,
            pesan=f"{message} ({format_date(installment_date)})",
            jenis=JATUH_TEMPO,
            data=payload,
        )
        if success:
            logger.info("Due date notification created for loan %s", loan.id)
        else:
            logger.error("Failed to create due date notification for loan %s", loan.id)
        return success
