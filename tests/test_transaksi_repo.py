"""Tests for the transaction repository."""

import pytest

from koperasi.models.transaksi import Transaksi
from koperasi.repositories.transaksi_repo import TransaksiRepository


@pytest.fixture
def seeded_client(fake_client):
    fake_client.tables["transaksi"] = [
        {
            "id": f"x{i}",
            "anggota_id": "a1",
            "tabungan_id": "t1" if i % 2 else "t2",
            "tipe_transaksi": "masuk" if i % 2 else "keluar",
            "kategori": "setoran" if i % 2 else "penarikan",
            "jumlah": 1000 * i,
            "created_at": f"2026-10-{i:02d}T08:00:00Z",
        }
        for i in range(1, 8)
    ]
    return fake_client


@pytest.fixture
def transaksi_repo(seeded_client):
    return TransaksiRepository(seeded_client)


def test_find_by_anggota_newest_first(transaksi_repo):
    rows = transaksi_repo.find_by_anggota("a1")
    assert [t.id for t in rows] == ["x7", "x6", "x5", "x4", "x3", "x2", "x1"]


def test_find_by_anggota_paginates(transaksi_repo):
    rows = transaksi_repo.find_by_anggota("a1", limit=3, offset=2)
    assert [t.id for t in rows] == ["x5", "x4", "x3"]


def test_find_by_anggota_filters_direction(transaksi_repo):
    rows = transaksi_repo.find_by_anggota("a1", tipe_transaksi="keluar")
    assert {t.tipe_transaksi for t in rows} == {"keluar"}
    assert len(rows) == 3


def test_find_by_tabungan(transaksi_repo):
    rows = transaksi_repo.find_by_tabungan("t1", limit=2)
    assert [t.id for t in rows] == ["x7", "x5"]


def test_sum_jumlah(transaksi_repo):
    assert transaksi_repo.sum_jumlah("a1", "masuk") == 1000 * (1 + 3 + 5 + 7)
    assert transaksi_repo.sum_jumlah("a1", "keluar") == 1000 * (2 + 4 + 6)
    assert transaksi_repo.sum_jumlah("nobody", "masuk") == 0


def test_create_returns_id(transaksi_repo):
    txn = Transaksi.create_mutasi(
        anggota_id="a1", tabungan_id="t1", tipe_transaksi="masuk", kategori="setoran",
        jumlah=5000, saldo_sebelum=0, saldo_sesudah=5000, deskripsi="Setoran tabungan", prefix="SETOR",
    )

    new_id = transaksi_repo.create(txn)

    stored = transaksi_repo.find_by_id(new_id)
    assert stored.reference_number == txn.reference_number
    assert stored.saldo_sesudah == 5000
    assert stored.created_at == txn.created_at
