"""Indonesian-locale formatting and display lookups."""

from datetime import date, datetime, timedelta, timezone

from koperasi.models.base import parse_timestamp, round_half_up

WIB = timezone(timedelta(hours=7), 'WIB')

MONTHS = (
    'Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni',
    'Juli', 'Agustus', 'September', 'Oktober', 'November', 'Desember',
)
SHORT_MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'Mei', 'Jun', 'Jul', 'Agu', 'Sep', 'Okt', 'Nov', 'Des')

# kode -> (gradient start, gradient end, icon)
TABUNGAN_STYLES = {
    'SIBAROKAH': ('#003D82', '#0066CC', 'bank'),
    'SIMUROJA': ('#004D40', '#00796B', 'calendar-clock'),
    'SIDIKA': ('#4A148C', '#7B1FA2', 'school'),
    'SIFITRI': ('#1A237E', '#303F9F', 'star-crescent'),
    'SIQURBAN': ('#BF360C', '#E64A19', 'sheep'),
    'SINIKA': ('#880E4F', '#C2185B', 'ring'),
    'SIUMROH': ('#0D47A1', '#1976D2', 'mosque'),
}
DEFAULT_TABUNGAN_STYLE = ('#003D82', '#0066CC', 'bank')

TRANSACTION_ICONS = {
    'transfer': 'bank-transfer',
    'pembayaran': 'cash-multiple',
    'tabungan': 'piggy-bank',
    'pinjaman': 'cash-refund',
}


def format_number(amount) -> str:
    """Group thousands with dots: 1500000 -> '1.500.000'."""
    value = round_half_up(abs(amount))
    text = '{:,}'.format(value).replace(',', '.')
    return '-' + text if amount < 0 and value else text


def format_currency(amount) -> str:
    """Format a number as Rupiah without decimals: 'Rp 1.500.000'."""
    if amount is None:
        amount = 0
    text = 'Rp ' + format_number(abs(amount))
    return '-' + text if amount < 0 and round_half_up(abs(amount)) else text


def _to_local(value) -> datetime | date | None:
    if isinstance(value, datetime):
        return value.astimezone(WIB) if value.tzinfo else value
    if isinstance(value, date):
        return value
    parsed = parse_timestamp(value)
    return parsed.astimezone(WIB) if parsed else None


def format_date(value) -> str:
    """Format a date as '17 Oktober 2026'; empty values become '-'."""
    if not value:
        return '-'
    local = _to_local(value)
    return f'{local.day} {MONTHS[local.month - 1]} {local.year}'


def format_short_date(value) -> str:
    """Format a date as '17 Okt 2026'."""
    if not value:
        return '-'
    local = _to_local(value)
    return f'{local.day} {SHORT_MONTHS[local.month - 1]} {local.year}'


def format_datetime(value) -> str:
    """Format a timestamp as '17 Oktober 2026 pukul 14.30' in WIB."""
    if not value:
        return '-'
    local = _to_local(value)
    if not isinstance(local, datetime):
        return format_date(local)
    return f'{format_date(local)} pukul {local.hour:02d}.{local.minute:02d}'


def format_transaction_type(tipe: str) -> str:
    return {'masuk': 'Masuk', 'keluar': 'Keluar'}.get(tipe, tipe)


def format_transaction_category(kategori: str) -> str:
    return {
        'setoran': 'Setoran',
        'penarikan': 'Penarikan',
        'transfer': 'Transfer',
        'pembayaran': 'Pembayaran',
        'bagi_hasil': 'Bagi Hasil',
        'biaya_admin': 'Biaya Admin',
    }.get(kategori, kategori)


def get_transaction_color(tipe: str) -> str:
    if tipe == 'masuk':
        return '#2ec27e'
    if tipe == 'keluar':
        return '#e01b24'
    return '#3584e4'


def get_transaction_gradient(tipe: str, kategori: str | None) -> tuple[str, str]:
    if tipe == 'masuk':
        return ('#00875A', '#20B982')
    if kategori == 'transfer':
        return ('#0066CC', '#0095FF')
    if kategori == 'pembayaran':
        return ('#9C27B0', '#BA68C8')
    return ('#E53935', '#FF5252')


def get_transaction_icon(kategori: str | None) -> str:
    return TRANSACTION_ICONS.get(kategori, 'wallet-outline')


def get_tabungan_style(kode: str | None) -> tuple[str, str, str]:
    """Gradient colors and icon name for a savings type code."""
    return TABUNGAN_STYLES.get(kode, DEFAULT_TABUNGAN_STYLE)


def hex_to_int(color: str) -> int:
    """'#0066CC' -> 0x0066CC, for embed colors."""
    return int(color.lstrip('#'), 16)


def progress_bar(percent: int, width: int = 10) -> str:
    filled = max(0, min(width, round_half_up(percent / 100 * width)))
    return '█' * filled + '░' * (width - filled)
