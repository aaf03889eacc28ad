"""Tests for the savings repositories."""

from datetime import date

import pytest

from koperasi.repositories.tabungan_repo import JenisTabunganRepository, TabunganRepository


@pytest.fixture
def seeded_client(fake_client):
    fake_client.tables["jenis_tabungan"] = [
        {"id": "j1", "kode": "SIBAROKAH", "nama": "Si Barokah", "minimum_setoran": 10000, "is_active": True},
        {"id": "j2", "kode": "SIDIKA", "nama": "Si Dika", "minimum_setoran": 50000, "is_active": True},
        {"id": "j3", "kode": "SILAMA", "nama": "Aa Lama", "is_active": False},
    ]
    fake_client.tables["tabungan"] = [
        {
            "id": "t1", "anggota_id": "a1", "nomor_rekening": "1001-01", "saldo": 150000,
            "jenis_tabungan_id": "j1", "tanggal_buka": "2025-01-01", "created_at": "2025-01-01T00:00:00Z",
        },
        {
            "id": "t2", "anggota_id": "a1", "nomor_rekening": "1001-02", "saldo": 0,
            "jenis_tabungan_id": "j2", "target_saldo": 1000000, "created_at": "2025-06-01T00:00:00Z",
        },
    ]
    return fake_client


@pytest.fixture
def jenis_repo(seeded_client):
    return JenisTabunganRepository(seeded_client)


@pytest.fixture
def tabungan_repo(seeded_client):
    return TabunganRepository(seeded_client)


def test_find_active_jenis_ordered_by_name(jenis_repo):
    assert [j.kode for j in jenis_repo.find_active()] == ["SIBAROKAH", "SIDIKA"]


def test_find_jenis_by_kode(jenis_repo):
    assert jenis_repo.find_by_kode("SIDIKA").minimum_setoran == 50000
    assert jenis_repo.find_by_kode("NOPE") is None


def test_find_by_anggota_joins_jenis(tabungan_repo):
    accounts = tabungan_repo.find_by_anggota("a1")

    assert [t.id for t in accounts] == ["t1", "t2"]
    assert accounts[0].jenis_tabungan.kode == "SIBAROKAH"
    assert accounts[0].tanggal_buka == date(2025, 1, 1)
    assert accounts[1].progress == 0


def test_find_latest_by_anggota(tabungan_repo):
    assert tabungan_repo.find_latest_by_anggota("a1").id == "t2"
    assert tabungan_repo.find_latest_by_anggota("a2") is None


def test_get_and_update_saldo(tabungan_repo, seeded_client):
    assert tabungan_repo.get_saldo("t1") == 150000
    assert tabungan_repo.get_saldo("missing") is None

    tabungan_repo.update_saldo("t1", 200000)

    row = seeded_client.tables["tabungan"][0]
    assert row["saldo"] == 200000
    assert row["last_transaction_date"] == row["updated_at"]


def test_open_calls_procedure(tabungan_repo, seeded_client):
    tabungan_repo.open("a1", "SIDIKA", 50000, date(2030, 1, 1))

    assert seeded_client.calls == [
        (
            "buka_tabungan",
            {
                "p_anggota_id": "a1",
                "p_jenis_kode": "SIDIKA",
                "p_setoran_awal": 50000,
                "p_tanggal_jatuh_tempo": "2030-01-01",
            },
        )
    ]
