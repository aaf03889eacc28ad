"""Tests for PembiayaanService."""

import pytest

from koperasi.models.pembiayaan import Pembiayaan
from koperasi.repositories.pembiayaan_repo import PembiayaanRepository
from koperasi.services.pembiayaan_service import PembiayaanService

LOAN_ID = "3f2b8c1e-4a5d-4e6f-8a7b-9c0d1e2f3a4b"


@pytest.fixture
def seeded_client(fake_client):
    fake_client.tables["pembiayaan"] = [
        {"id": LOAN_ID, "anggota_id": "a1", "status": "aktif", "jenis_pinjaman": "Modal Usaha",
         "jumlah": 5000000, "total_pembayaran": 6000000, "sisa_pembayaran": 1500000,
         "created_at": "2026-01-01T00:00:00Z", "updated_at": "2026-01-01T00:00:00Z"},
        {"id": "p-old", "anggota_id": "a1", "status": "lunas", "jenis_pinjaman": "Konsumtif",
         "created_at": "2024-01-01T00:00:00Z", "updated_at": "2025-01-01T00:00:00Z"},
    ]
    return fake_client


@pytest.fixture
def pembiayaan_service(seeded_client):
    return PembiayaanService(PembiayaanRepository(seeded_client))


def test_get_pembiayaan_by_anggota(pembiayaan_service):
    assert [p.id for p in pembiayaan_service.get_pembiayaan_by_anggota("a1")] == [LOAN_ID, "p-old"]


def test_get_pembiayaan_by_id(pembiayaan_service):
    assert pembiayaan_service.get_pembiayaan_by_id(LOAN_ID).jenis_pinjaman == "Modal Usaha"


def test_get_pembiayaan_by_id_rejects_non_uuid(pembiayaan_service, seeded_client):
    assert pembiayaan_service.get_pembiayaan_by_id("p-old") is None
    assert seeded_client.executed == []


def test_get_pembiayaan_by_id_backend_failure(pembiayaan_service, seeded_client):
    seeded_client.fail("pembiayaan")
    assert pembiayaan_service.get_pembiayaan_by_id(LOAN_ID) is None


def test_get_pembiayaan_history(pembiayaan_service):
    assert [p.id for p in pembiayaan_service.get_pembiayaan_history("a1")] == ["p-old"]


@pytest.mark.parametrize(
    "status,total,sisa,expected",
    [
        ("aktif", 6000000, 1500000, 75),
        ("lunas", 6000000, 1500000, 100),
        ("aktif", 0, 0, 0),
        ("aktif", 3, 2, 33),
        ("aktif", 1000, 2000, 0),
    ],
)
def test_calculate_progress(status, total, sisa, expected):
    loan = Pembiayaan(
        id="p", anggota_id="a1", jenis_pinjaman="x", status=status, jumlah=0,
        jatuh_tempo=None, total_pembayaran=total, sisa_pembayaran=sisa,
    )
    assert PembiayaanService.calculate_progress(loan) == expected


def test_status_label_and_color():
    assert PembiayaanService.get_status_label("diajukan") == "Diajukan"
    assert PembiayaanService.get_status_color("aktif") == "#4CAF50"
    assert PembiayaanService.get_status_label("lain") == "lain"
    assert PembiayaanService.get_status_color("lain") == "#999999"
