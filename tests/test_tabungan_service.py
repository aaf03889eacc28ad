"""Tests for TabunganService opening, deposit and withdrawal."""

import pytest

from koperasi.models.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    TabunganNotFoundError,
    TransactionFailedError,
)
from koperasi.repositories.tabungan_repo import JenisTabunganRepository, TabunganRepository
from koperasi.repositories.transaksi_repo import TransaksiRepository
from koperasi.services.tabungan_service import TabunganService


@pytest.fixture
def seeded_client(fake_client):
    fake_client.tables["jenis_tabungan"] = [
        {"id": "j1", "kode": "SIBAROKAH", "nama": "Si Barokah", "minimum_setoran": 10000, "is_active": True},
    ]
    fake_client.tables["tabungan"] = [
        {"id": "t1", "anggota_id": "a1", "nomor_rekening": "1001-01", "saldo": 100000,
         "jenis_tabungan_id": "j1", "created_at": "2025-01-01T00:00:00Z"},
    ]
    fake_client.tables["transaksi"] = []

    def buka_tabungan(params):
        fake_client.tables["tabungan"].append(
            {"id": "t-new", "anggota_id": params["p_anggota_id"], "nomor_rekening": "1001-02",
             "saldo": params["p_setoran_awal"], "jenis_tabungan_id": "j1",
             "created_at": "2026-10-17T00:00:00Z"}
        )
        return "t-new"

    fake_client.procedures["buka_tabungan"] = buka_tabungan
    return fake_client


@pytest.fixture
def tabungan_service(seeded_client):
    return TabunganService(
        jenis_repo=JenisTabunganRepository(seeded_client),
        tabungan_repo=TabunganRepository(seeded_client),
        transaksi_repo=TransaksiRepository(seeded_client),
    )


def _saldo(client, tabungan_id="t1"):
    return next(r for r in client.tables["tabungan"] if r["id"] == tabungan_id)["saldo"]


def test_setor_success(tabungan_service, seeded_client):
    txn = tabungan_service.setor_tabungan("t1", "a1", 50000)

    assert txn.id is not None
    assert txn.tipe_transaksi == "masuk"
    assert txn.kategori == "setoran"
    assert txn.saldo_sebelum == 100000
    assert txn.saldo_sesudah == 150000
    assert txn.reference_number.startswith("SETOR-")
    assert txn.deskripsi == "Setoran tabungan"
    assert _saldo(seeded_client) == 150000
    assert len(seeded_client.tables["transaksi"]) == 1
    assert seeded_client.rpc_names() == ["begin_transaction", "commit_transaction"]


def test_tarik_success(tabungan_service, seeded_client):
    txn = tabungan_service.tarik_tabungan("t1", "a1", 40000)

    assert txn.tipe_transaksi == "keluar"
    assert txn.kategori == "penarikan"
    assert txn.reference_number.startswith("TARIK-")
    assert _saldo(seeded_client) == 60000


def test_tarik_whole_balance(tabungan_service, seeded_client):
    tabungan_service.tarik_tabungan("t1", "a1", 100000)
    assert _saldo(seeded_client) == 0


def test_tarik_insufficient_balance(tabungan_service, seeded_client):
    with pytest.raises(InsufficientBalanceError, match="Saldo tidak mencukupi"):
        tabungan_service.tarik_tabungan("t1", "a1", 100001)

    assert _saldo(seeded_client) == 100000
    assert seeded_client.calls == []


@pytest.mark.parametrize("jumlah", [0, -5000])
def test_setor_rejects_non_positive(tabungan_service, jumlah):
    with pytest.raises(InvalidAmountError):
        tabungan_service.setor_tabungan("t1", "a1", jumlah)


def test_setor_unknown_tabungan(tabungan_service):
    with pytest.raises(TabunganNotFoundError):
        tabungan_service.setor_tabungan("missing", "a1", 1000)


def test_setor_rolls_back_when_ledger_insert_fails(tabungan_service, seeded_client):
    seeded_client.fail("transaksi")

    with pytest.raises(TransactionFailedError, match="Gagal melakukan setoran"):
        tabungan_service.setor_tabungan("t1", "a1", 50000)

    assert seeded_client.rpc_names() == ["begin_transaction", "rollback_transaction"]


def test_tarik_fails_when_transaction_cannot_begin(tabungan_service, seeded_client):
    seeded_client.fail("rpc:begin_transaction")

    with pytest.raises(TransactionFailedError, match="Gagal memulai transaksi"):
        tabungan_service.tarik_tabungan("t1", "a1", 1000)
    assert _saldo(seeded_client) == 100000


def test_balance_read_failure(tabungan_service, seeded_client):
    seeded_client.fail("tabungan")
    with pytest.raises(TransactionFailedError, match="Gagal mendapatkan saldo tabungan"):
        tabungan_service.setor_tabungan("t1", "a1", 1000)


def test_buka_tabungan(tabungan_service, seeded_client):
    result = tabungan_service.buka_tabungan("a1", "SIBAROKAH", 25000)

    assert result.message == "Rekening tabungan berhasil dibuka"
    assert result.tabungan_id == "t-new"
    assert result.nomor_rekening == "1001-02"
    assert seeded_client.calls[0][1]["p_tanggal_jatuh_tempo"] is None


def test_buka_tabungan_below_minimum(tabungan_service, seeded_client):
    with pytest.raises(InvalidAmountError, match="Rp 10.000"):
        tabungan_service.buka_tabungan("a1", "SIBAROKAH", 5000)
    assert seeded_client.calls == []


def test_buka_tabungan_negative(tabungan_service):
    with pytest.raises(InvalidAmountError, match="tidak boleh negatif"):
        tabungan_service.buka_tabungan("a1", "SIBAROKAH", -1)


def test_buka_tabungan_procedure_failure(tabungan_service, seeded_client):
    seeded_client.fail("rpc:buka_tabungan", message="Jenis tabungan tidak aktif")
    with pytest.raises(TransactionFailedError, match="Jenis tabungan tidak aktif"):
        tabungan_service.buka_tabungan("a1", "SIBAROKAH", 25000)


def test_buka_tabungan_readback_failure_still_succeeds(tabungan_service, seeded_client):
    seeded_client.procedures["buka_tabungan"] = lambda params: None
    seeded_client.tables["tabungan"] = []

    result = tabungan_service.buka_tabungan("a9", "SIBAROKAH", 25000)

    assert "gagal mendapatkan detailnya" in result.message
    assert result.tabungan_id is None


def test_riwayat_transaksi(tabungan_service):
    tabungan_service.setor_tabungan("t1", "a1", 1000)
    tabungan_service.setor_tabungan("t1", "a1", 2000)

    rows = tabungan_service.get_riwayat_transaksi("t1", limit=1)
    assert len(rows) == 1


def test_get_tabungan(tabungan_service, seeded_client):
    assert tabungan_service.get_tabungan_by_anggota("a1")[0].jenis_tabungan.nama == "Si Barokah"
    assert tabungan_service.get_tabungan_by_id("t1").saldo == 100000
    seeded_client.fail("tabungan")
    assert tabungan_service.get_tabungan_by_id("t1") is None
