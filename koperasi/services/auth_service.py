"""Phone and PIN based authentication."""

import logging
import sqlite3
from dataclasses import dataclass

from koperasi.models.anggota import Akun, Anggota
from koperasi.models.exceptions import (
    AccountNotFoundError,
    BackendError,
    InvalidPinError,
)
from koperasi.repositories.anggota_repo import AkunRepository, AnggotaRepository
from koperasi.storage import SessionStorage

logger = logging.getLogger("koperasi.auth")

PHONE_NUMBER_KEY = "koperasi_auth_phone_number"
ACCOUNT_ID_KEY = "koperasi_auth_account_id"
PIN_LENGTH = 6


@dataclass
class SessionInfo:
    """What local storage says about an owner's session."""

    is_logged_in: bool
    phone_number: str | None
    account_id: str | None


@dataclass
class AccountDetails:
    """A login account with its member row and balance."""

    account: Akun
    member: Anggota
    balance: float


class AuthService:
    """Service layer for login, logout and PIN management."""

    def __init__(
        self,
        akun_repo: AkunRepository,
        anggota_repo: AnggotaRepository,
        storage: SessionStorage,
    ):
        """
        Initialize the AuthService.

        Args:
            akun_repo: Repository for login accounts
            anggota_repo: Repository for members
            storage: Local storage for session identifiers
        """
        self._akun_repo = akun_repo
        self._anggota_repo = anggota_repo
        self._storage = storage

    def check_existing_session(self, owner: str) -> SessionInfo:
        """
        Check whether ``owner`` is already logged in.

        Storage failures are logged and reported as logged out.
        """
        try:
            phone_number = self._storage.get_item(owner, PHONE_NUMBER_KEY)
            account_id = self._storage.get_item(owner, ACCOUNT_ID_KEY)
        except sqlite3.Error:
            logger.exception("Error checking existing session")
            return SessionInfo(is_logged_in=False, phone_number=None, account_id=None)
        return SessionInfo(
            is_logged_in=bool(account_id),
            phone_number=phone_number,
            account_id=account_id,
        )

    def find_account_by_phone(self, phone_number: str) -> Akun | None:
        """
        Find an active account by phone number.

        Raises:
            BackendError: If the lookup fails
        """
        return self._akun_repo.find_active_by_phone(phone_number)

    def verify_pin(self, account_id: str, pin: str) -> bool:
        """Compare a PIN with the stored one. Backend errors count as a mismatch."""
        try:
            stored = self._akun_repo.get_pin(account_id)
        except BackendError:
            logger.error("Error verifying PIN for account %s", account_id)
            return False
        return stored is not None and stored == pin

    def login_with_phone(self, owner: str, phone_number: str, pin: str) -> str:
        """
        Log ``owner`` in with a phone number and PIN.

        Args:
            owner: The chat user id acting as the device
            phone_number: Registered phone number
            pin: Plaintext PIN

        Returns:
            The account id, which is also persisted to storage

        Raises:
            AccountNotFoundError: If the phone number is not registered
            InvalidPinError: If the PIN does not match
            BackendError: If the backend lookup fails
        """
        account = self.find_account_by_phone(phone_number)
        if account is None:
            raise AccountNotFoundError("Nomor telepon tidak terdaftar")

        if not self.verify_pin(account.id, pin):
            logger.info("Invalid PIN for account %s", account.id)
            raise InvalidPinError("PIN tidak valid")

        self._storage.set_item(owner, PHONE_NUMBER_KEY, phone_number)
        self._storage.set_item(owner, ACCOUNT_ID_KEY, account.id)
        logger.info("Owner %s logged in as account %s", owner, account.id)
        return account.id

    def logout(self, owner: str) -> None:
        """Forget the stored session of ``owner``."""
        self._storage.remove_item(owner, PHONE_NUMBER_KEY)
        self._storage.remove_item(owner, ACCOUNT_ID_KEY)
        logger.info("Owner %s logged out", owner)

    def get_account_details(self, account_id: str) -> AccountDetails | None:
        """
        Load an account together with its member row.

        Returns:
            AccountDetails, or None if either row is missing

        Raises:
            BackendError: If the backend cannot be reached
        """
        account = self._akun_repo.find_by_id(account_id)
        if account is None or account.anggota_id is None:
            logger.error("Account %s not found", account_id)
            return None
        member = self._anggota_repo.find_by_id(account.anggota_id)
        if member is None:
            logger.error("Member %s not found", account.anggota_id)
            return None
        return AccountDetails(account=account, member=member, balance=member.saldo)

    def validate_member(self, nama: str, nomor_rekening: str) -> Anggota | None:
        """Find the member matching a name and account number, or None."""
        try:
            return self._anggota_repo.find_by_name_and_rekening(nama, nomor_rekening)
        except BackendError:
            logger.error("Error validating member %s", nomor_rekening)
            return None

    def register_phone(self, anggota_id: str, phone_number: str) -> Akun:
        """
        Link a phone number to a member, creating the login account if needed.

        Raises:
            BackendError: If the account cannot be created or updated
        """
        existing = self._akun_repo.find_by_anggota(anggota_id)
        if existing is not None:
            logger.info("Updating phone number of account %s", existing.id)
            return self._akun_repo.update_phone(existing.id, phone_number)
        logger.info("Creating account for member %s", anggota_id)
        return self._akun_repo.create(anggota_id, phone_number)

    def find_account_by_member(self, anggota_id: str) -> Akun | None:
        """The login account of a member, or None if the member has none yet."""
        return self._akun_repo.find_by_anggota(anggota_id)

    def register(self, anggota_id: str, phone_number: str, pin: str | None = None) -> Akun:
        """
        Link a phone number and, for an account without a PIN, set its PIN.

        An existing PIN is kept and ``pin`` is ignored. The PIN is checked
        before anything is written.

        Raises:
            InvalidPinError: If a PIN is needed and ``pin`` is missing or malformed
            BackendError: If the account cannot be created or updated
        """
        existing = self._akun_repo.find_by_anggota(anggota_id)
        needs_pin = existing is None or not existing.has_pin
        if needs_pin:
            _check_pin_format(pin)
        account = self.register_phone(anggota_id, phone_number)
        if needs_pin:
            self._akun_repo.update_pin(account.id, pin)
            account.pin = pin
        return account

    def set_pin(self, account_id: str, pin: str) -> None:
        """
        Store a new PIN for an account.

        Raises:
            InvalidPinError: If the PIN is not exactly six digits
            BackendError: If the update fails
        """
        _check_pin_format(pin)
        self._akun_repo.update_pin(account_id, pin)

    def change_pin(self, account_id: str, old_pin: str, new_pin: str, confirm_pin: str) -> None:
        """
        Replace a PIN after checking the old one.

        Raises:
            InvalidPinError: If the old PIN is wrong, the confirmation differs,
                or the new PIN equals the old one
        """
        if not self.verify_pin(account_id, old_pin):
            raise InvalidPinError("PIN lama tidak sesuai. Silakan coba lagi.")
        if new_pin != confirm_pin:
            raise InvalidPinError("PIN konfirmasi tidak sesuai. Silakan coba lagi.")
        if new_pin == old_pin:
            raise InvalidPinError("PIN baru harus berbeda dari PIN lama.")
        self.set_pin(account_id, new_pin)
        logger.info("PIN changed for account %s", account_id)


def _check_pin_format(pin: str | None) -> None:
    if pin is None or len(pin) != PIN_LENGTH or not pin.isdigit():
        raise InvalidPinError(f"PIN harus terdiri dari {PIN_LENGTH} digit angka")
