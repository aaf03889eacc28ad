import logging
from datetime import datetime, timezone

import discord
from discord.ext import commands
from tabulate import tabulate

from cogs.base import KoperasiCog
from koperasi.formatting import format_currency, format_date, hex_to_int, progress_bar
from koperasi.models.base import round_half_up
from koperasi.models.exceptions import PembiayaanNotFoundError
from koperasi.models.pembiayaan import AKTIF
from koperasi.services.loan_notification_service import installment_dates, loan_term_months

logger = logging.getLogger('koperasi.cogs.pinjaman')


class PinjamanCog(KoperasiCog, name='pinjaman'):
    """Loan overview commands."""

    async def _resolve(self, ctx, ref):
        member = self._member(ctx)
        loans = await self._run(self.bot.data.fetch_pembiayaan, member.id)
        if ref.isdigit() and 1 <= int(ref) <= len(loans):
            return loans[int(ref) - 1]
        loan = await self._run(self.bot.pembiayaan_service.get_pembiayaan_by_id, ref)
        if loan is None or loan.anggota_id != member.id:
            raise PembiayaanNotFoundError('Pinjaman tidak ditemukan')
        return loan

    @commands.command(name='pinjaman', help='$pinjaman [refresh] Daftar pinjaman')
    async def pinjaman(self, ctx, refresh: str = ''):
        member = self._member(ctx)
        loans = await self._run(self.bot.data.fetch_pembiayaan, member.id, self._force(refresh))
        if not loans:
            await self._reply(ctx, 'Anda belum memiliki pinjaman')
            return
        rows = [
            [i, p.jenis_pinjaman, format_currency(p.jumlah), format_currency(p.sisa_pembayaran), f'{p.progress}%', p.status_label]
            for i, p in enumerate(loans, start=1)
        ]
        await self._reply(ctx, tabulate(rows, headers=['No', 'Jenis', 'Jumlah', 'Sisa', 'Lunas', 'Status'], stralign='right'))

    @commands.command(name='pinjaman-detail', help='$pinjaman-detail <no|id> Rincian satu pinjaman')
    async def pinjaman_detail(self, ctx, ref: str):
        loan = await self._resolve(ctx, ref)
        em = discord.Embed(
            title=f'Pinjaman {loan.jenis_pinjaman}',
            description=loan.status_label,
            color=hex_to_int(loan.status_color),
        )
        em.add_field(name='Jumlah Pinjaman', value=format_currency(loan.jumlah))
        em.add_field(name='Total Pembayaran', value=format_currency(loan.total_pembayaran))
        em.add_field(name='Sisa Pembayaran', value=format_currency(loan.sisa_pembayaran))
        em.add_field(name='Terbayar', value=f'{progress_bar(loan.progress)} {loan.progress}%', inline=False)
        em.add_field(name='Jatuh Tempo', value=format_date(loan.jatuh_tempo))
        em.add_field(name='Tanggal Pengajuan', value=format_date(loan.created_at))

        term = loan_term_months(loan)
        if loan.status == AKTIF and term > 0:
            now = datetime.now(timezone.utc)
            upcoming = [d for d in installment_dates(loan) if d >= now]
            em.add_field(name='Angsuran per Bulan', value=format_currency(round_half_up(loan.total_pembayaran / term)))
            if upcoming:
                em.add_field(name='Angsuran Berikutnya', value=format_date(upcoming[0]))
        await ctx.send(embed=em)

    @commands.command(name='pinjaman-riwayat', help='$pinjaman-riwayat Pinjaman yang sudah lunas atau ditolak')
    async def pinjaman_riwayat(self, ctx):
        member = self._member(ctx)
        loans = await self._run(self.bot.pembiayaan_service.get_pembiayaan_history, member.id)
        if not loans:
            await self._reply(ctx, 'Belum ada riwayat pinjaman')
            return
        rows = [
            [p.jenis_pinjaman, format_currency(p.jumlah), p.status_label, format_date(p.updated_at)]
            for p in loans
        ]
        await self._reply(ctx, tabulate(rows, headers=['Jenis', 'Jumlah', 'Status', 'Diperbarui'], stralign='right'))


async def setup(bot):
    await bot.add_cog(PinjamanCog(bot))
    logger.info('pinjaman is loaded')
