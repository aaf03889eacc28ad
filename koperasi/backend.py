"""Access to the hosted Supabase backend."""

import logging
from contextlib import contextmanager

from postgrest.exceptions import APIError
from supabase import Client, create_client

from koperasi.models.exceptions import BackendError, TransactionFailedError

logger = logging.getLogger("koperasi.backend")


def connect(url: str, key: str) -> Client:
    """Create the process-wide Supabase client."""
    logger.info("Connecting to Supabase at %s", url)
    return create_client(url, key)


def execute(query, action: str):
    """
    Run a query builder and translate backend failures.

    Args:
        query: A postgrest request builder, ready to execute
        action: Short description used in logs and the raised error

    Returns:
        The postgrest APIResponse

    Raises:
        BackendError: If the backend rejects the query
    """
    try:
        return query.execute()
    except APIError as err:
        logger.error("Error in %s: %s (code=%s)", action, err.message, err.code)
        raise BackendError(err.message or f"Gagal {action}", code=err.code) from err


def call(client: Client, procedure: str, params: dict | None = None):
    """Call a stored procedure and return its data."""
    response = execute(client.rpc(procedure, params or {}), f"rpc {procedure}")
    return response.data


@contextmanager
def remote_transaction(client: Client):
    """
    Wrap a block in the backend's begin/commit/rollback procedures.

    Atomicity is whatever the backend provides for these calls; the client
    only brackets its writes. Any exception inside the block triggers a
    rollback and is re-raised.

    Raises:
        TransactionFailedError: If the transaction cannot be started
    """
    try:
        call(client, "begin_transaction")
    except BackendError as err:
        raise TransactionFailedError("Gagal memulai transaksi") from err

    try:
        yield
        call(client, "commit_transaction")
    except Exception:
        try:
            call(client, "rollback_transaction")
        except BackendError:
            logger.exception("Rollback failed")
        raise
