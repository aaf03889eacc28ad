"""Per-user authentication state held by the bot."""

import logging
from dataclasses import dataclass

from koperasi.models.anggota import Akun, Anggota
from koperasi.models.exceptions import AccountNotFoundError, BackendError, NotAuthenticatedError
from koperasi.services.auth_service import ACCOUNT_ID_KEY, AuthService
from koperasi.storage import SessionStorage

logger = logging.getLogger("koperasi.auth.context")


@dataclass
class AuthState:
    is_authenticated: bool = False
    account: Akun | None = None
    member: Anggota | None = None
    balance: float = 0
    error: str | None = None


class AuthContext:
    """Keeps one AuthState per owner (chat user)."""

    def __init__(self, auth_service: AuthService, storage: SessionStorage):
        self._auth_service = auth_service
        self._storage = storage
        self._states: dict[str, AuthState] = {}

    def state(self, owner: str) -> AuthState:
        return self._states.get(owner, AuthState())

    def restore_sessions(self) -> int:
        """
        Log every owner with a stored account id back in.

        Ids that no longer resolve to an account are removed from storage.
        A backend failure keeps the stored id for the next start.

        Returns:
            The number of sessions restored
        """
        restored = 0
        for owner in self._storage.owners_with(ACCOUNT_ID_KEY):
            account_id = self._storage.get_item(owner, ACCOUNT_ID_KEY)
            try:
                self.login(owner, account_id)
            except AccountNotFoundError:
                logger.warning("Dropping stale session of owner %s", owner)
                self._auth_service.logout(owner)
            except BackendError:
                logger.error("Could not restore session of owner %s", owner)
            else:
                restored += 1
        logger.info("Restored %d sessions", restored)
        return restored

    def sign_in(self, owner: str, phone_number: str, pin: str) -> AuthState:
        """
        Check a phone number and PIN, then load the account.

        Raises:
            AccountNotFoundError: If the phone number is unknown
            InvalidPinError: If the PIN is wrong
        """
        account_id = self._auth_service.login_with_phone(owner, phone_number, pin)
        return self.login(owner, account_id)

    def login(self, owner: str, account_id: str) -> AuthState:
        """
        Load account details for ``owner`` and mark them authenticated.

        Raises:
            AccountNotFoundError: If the account or its member cannot be loaded
            BackendError: If the backend cannot be reached
        """
        details = self._auth_service.get_account_details(account_id)
        if details is None:
            self._states[owner] = AuthState(error="Akun tidak ditemukan")
            raise AccountNotFoundError("Akun tidak ditemukan")

        state = AuthState(
            is_authenticated=True,
            account=details.account,
            member=details.member,
            balance=details.balance,
        )
        self._states[owner] = state
        return state

    def logout(self, owner: str) -> None:
        self._auth_service.logout(owner)
        self._states.pop(owner, None)

    def refresh_user_data(self, owner: str) -> AuthState:
        """
        Reload account, member and balance. A failed reload keeps the old
        values and records an error on the state.

        Raises:
            NotAuthenticatedError: If ``owner`` is not logged in
        """
        state = self.state(owner)
        if not state.is_authenticated or state.account is None:
            raise NotAuthenticatedError("Silakan login terlebih dahulu")

        try:
            details = self._auth_service.get_account_details(state.account.id)
        except BackendError:
            details = None
        if details is None:
            logger.error("Failed to refresh account data of owner %s", owner)
            state.error = "Gagal memperbarui data akun"
            return state

        state.account = details.account
        state.member = details.member
        state.balance = details.balance
        state.error = None
        return state

    def require_member(self, owner: str) -> Anggota:
        """
        Return the logged-in member of ``owner``.

        Raises:
            NotAuthenticatedError: If there is no session
        """
        state = self.state(owner)
        if not state.is_authenticated or state.member is None:
            raise NotAuthenticatedError("Silakan login terlebih dahulu")
        return state.member

    def require_account(self, owner: str) -> Akun:
        state = self.state(owner)
        if not state.is_authenticated or state.account is None:
            raise NotAuthenticatedError("Silakan login terlebih dahulu")
        return state.account
