import logging

import discord
from discord.ext import commands
from tabulate import tabulate

from cogs.base import KoperasiCog
from cogs.dashboard import transaction_rows
from koperasi.formatting import (
    format_currency,
    format_date,
    get_tabungan_style,
    hex_to_int,
    progress_bar,
)
from koperasi.models.exceptions import TabunganNotFoundError
from koperasi.models.transaksi import KELUAR, MASUK

logger = logging.getLogger('koperasi.cogs.tabungan')


def rupiah(arg: str) -> int:
    """Parse '1500000', '1.500.000' or '1,500,000' as an amount."""
    return int(arg.replace('.', '').replace(',', ''))


class TabunganCog(KoperasiCog, name='tabungan'):
    """Savings accounts and transaction history."""

    async def _resolve(self, ctx, ref):
        """Find one of the author's savings accounts by list number, account number or id."""
        member = self._member(ctx)
        accounts = await self._run(self.bot.data.fetch_tabungan, member.id)
        if ref.isdigit() and 1 <= int(ref) <= len(accounts):
            return member, accounts[int(ref) - 1]
        for tabungan in accounts:
            if ref in (tabungan.id, tabungan.nomor_rekening):
                return member, tabungan
        raise TabunganNotFoundError('Tabungan tidak ditemukan')

    @commands.command(name='tabungan', help='$tabungan [refresh] Daftar rekening tabungan')
    async def tabungan(self, ctx, refresh: str = ''):
        member = self._member(ctx)
        accounts = await self._run(self.bot.data.fetch_tabungan, member.id, self._force(refresh))
        if not accounts:
            await self._reply(ctx, 'Anda belum memiliki rekening tabungan')
            return
        rows = [
            [i, t.nama, t.nomor_rekening, format_currency(t.saldo), t.status]
            for i, t in enumerate(accounts, start=1)
        ]
        table = tabulate(rows, headers=['No', 'Produk', 'Rekening', 'Saldo', 'Status'], stralign='right')
        await self._reply(ctx, table)

    @commands.command(name='tabungan-detail', help='$tabungan-detail <no|rekening> Rincian satu tabungan')
    async def tabungan_detail(self, ctx, ref: str):
        _, tabungan = await self._resolve(ctx, ref)
        start, _, _ = get_tabungan_style(tabungan.kode)
        em = discord.Embed(
            title=tabungan.nama,
            description=format_currency(tabungan.saldo),
            color=hex_to_int(start),
        )
        em.add_field(name='Nomor Rekening', value=tabungan.nomor_rekening)
        em.add_field(name='Status', value=tabungan.status)
        em.add_field(name='Dibuka', value=format_date(tabungan.tanggal_buka))
        if tabungan.tanggal_jatuh_tempo:
            em.add_field(name='Jatuh Tempo', value=format_date(tabungan.tanggal_jatuh_tempo))
        if tabungan.has_target:
            em.add_field(
                name='Target',
                value=f'{progress_bar(tabungan.progress)} {tabungan.progress}%\n{format_currency(tabungan.target_saldo)}',
                inline=False,
            )
        if tabungan.jenis_tabungan and tabungan.jenis_tabungan.deskripsi:
            em.set_footer(text=tabungan.jenis_tabungan.deskripsi)
        await ctx.send(embed=em)

    @commands.command(name='jenis-tabungan', help='$jenis-tabungan Produk tabungan yang tersedia')
    async def jenis_tabungan(self, ctx, refresh: str = ''):
        catalog = await self._run(self.bot.data.fetch_jenis_tabungan, self._force(refresh))
        rows = [
            [j.kode, j.nama, format_currency(j.minimum_setoran), f'{j.bagi_hasil}%' if j.bagi_hasil is not None else '-']
            for j in catalog
        ]
        await self._reply(ctx, tabulate(rows, headers=['Kode', 'Nama', 'Setoran Min.', 'Bagi Hasil']))

    @commands.command(name='buka', help='$buka <kode> <setoran> Buka rekening tabungan baru')
    async def buka(self, ctx, kode: str, setoran: rupiah):
        member = self._member(ctx)
        kode = kode.upper()
        if not await self._confirm(ctx, f'Buka tabungan {kode} dengan setoran awal {format_currency(setoran)}?'):
            return
        result = await self._run(self.bot.tabungan_service.buka_tabungan, member.id, kode, setoran)
        self.bot.data.invalidate_balances(member.id)
        text = result.message
        if result.nomor_rekening:
            text += f'\nNomor rekening: {result.nomor_rekening}'
        await self._reply(ctx, text)

    @commands.command(name='setor', help='$setor <no|rekening> <jumlah> Setor ke tabungan')
    async def setor(self, ctx, ref: str, jumlah: rupiah):
        member, tabungan = await self._resolve(ctx, ref)
        if not await self._confirm(ctx, f'Setor {format_currency(jumlah)} ke {tabungan.nama} ({tabungan.nomor_rekening})?'):
            return
        txn = await self._run(self.bot.tabungan_service.setor_tabungan, tabungan.id, member.id, jumlah)
        self.bot.data.invalidate_balances(member.id)
        await self._reply(
            ctx,
            f'Setoran berhasil\nSaldo: {format_currency(txn.saldo_sesudah)}\nReferensi: {txn.reference_number}',
        )

    @commands.command(name='tarik', help='$tarik <no|rekening> <jumlah> Tarik dari tabungan')
    async def tarik(self, ctx, ref: str, jumlah: rupiah):
        member, tabungan = await self._resolve(ctx, ref)
        if not await self._confirm(ctx, f'Tarik {format_currency(jumlah)} dari {tabungan.nama} ({tabungan.nomor_rekening})?'):
            return
        txn = await self._run(self.bot.tabungan_service.tarik_tabungan, tabungan.id, member.id, jumlah)
        self.bot.data.invalidate_balances(member.id)
        await self._reply(
            ctx,
            f'Penarikan berhasil\nSaldo: {format_currency(txn.saldo_sesudah)}\nReferensi: {txn.reference_number}',
        )

    @commands.command(name='riwayat', help='$riwayat <no|rekening> [n] Riwayat transaksi satu tabungan')
    async def riwayat(self, ctx, ref: str, n: int = 10):
        _, tabungan = await self._resolve(ctx, ref)
        n = max(1, min(n, self.bot.settings.max_history_rows))
        rows = await self._run(self.bot.tabungan_service.get_riwayat_transaksi, tabungan.id, n)
        if not rows:
            await self._reply(ctx, 'Belum ada transaksi')
            return
        table = tabulate(transaction_rows(rows), headers=['Tanggal', 'Jenis', 'Jumlah', 'Keterangan'], stralign='right')
        await self._reply(ctx, f'{tabungan.nama} {tabungan.nomor_rekening}\n{table}')

    @commands.command(name='transaksi', help='$transaksi [n] [masuk|keluar] [refresh] Transaksi terbaru')
    async def transaksi(self, ctx, *args: str):
        member = self._member(ctx)
        n = self.bot.settings.transaction_page_size
        tipe = None
        force = False
        for arg in args:
            if arg.isdigit():
                n = max(1, min(int(arg), self.bot.settings.max_history_rows))
            elif arg.lower() in (MASUK, KELUAR):
                tipe = arg.lower()
            elif self._force(arg):
                force = True

        if tipe is None and n == self.bot.settings.transaction_page_size:
            rows = await self._run(self.bot.data.fetch_transactions, member.id, force)
        else:
            rows = await self._run(self.bot.transaksi_service.get_transaksi_by_anggota, member.id, n, 0, tipe)
        if not rows:
            await self._reply(ctx, 'Belum ada transaksi')
            return

        table = tabulate(transaction_rows(rows), headers=['Tanggal', 'Jenis', 'Jumlah', 'Keterangan'], stralign='right')
        transfers = [t for t in rows if t.recipient_name or t.bank_name]
        if transfers:
            table += '\n\n' + '\n'.join(
                f'{t.reference_number or t.id}: {t.recipient_name or "-"} / {t.bank_name or "-"}' for t in transfers
            )
        await self._reply(ctx, table)


async def setup(bot):
    await bot.add_cog(TabunganCog(bot))
    logger.info('tabungan is loaded')
