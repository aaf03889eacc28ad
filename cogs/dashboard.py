import logging

import discord
from discord.ext import commands
from tabulate import tabulate

from cogs.base import KoperasiCog
from koperasi.formatting import (
    format_currency,
    format_date,
    format_short_date,
    format_transaction_category,
)

logger = logging.getLogger('koperasi.cogs.dashboard')


def transaction_rows(rows):
    """Table rows for a list of transactions: date, category, signed amount, description."""
    return [
        [
            format_short_date(t.created_at),
            format_transaction_category(t.kategori),
            ('+' if t.is_masuk else '-') + format_currency(t.jumlah),
            (t.deskripsi or '')[:24],
        ]
        for t in rows
    ]


class DashboardCog(KoperasiCog, name='dashboard'):
    """Balance, profile and summary commands."""

    @commands.command(name='saldo', help='$saldo [refresh] Lihat saldo')
    async def saldo(self, ctx, refresh: str = ''):
        owner = self._owner(ctx)
        member = self._member(ctx)
        if self._force(refresh):
            state = await self._run(self.bot.auth.refresh_user_data, owner)
        else:
            state = self.bot.auth.state(owner)
        tabungan = await self._run(self.bot.data.fetch_tabungan, member.id, self._force(refresh))

        em = discord.Embed(title='Saldo', description=format_currency(state.balance), color=0x0066CC)
        em.add_field(name='Nomor Rekening', value=member.nomor_rekening or '-')
        em.add_field(name='Jumlah Tabungan', value=str(len(tabungan)))
        if state.error:
            em.set_footer(text=state.error)
        await ctx.send(embed=em)

    @commands.command(name='profil', help='$profil Lihat data keanggotaan')
    async def profil(self, ctx):
        member = self._member(ctx)
        account = self.bot.auth.require_account(self._owner(ctx))
        fields = [
            ['Nama', member.nama],
            ['Nomor Rekening', member.nomor_rekening or '-'],
            ['Telepon', account.nomor_telepon or '-'],
            ['Alamat', ', '.join(p for p in (member.alamat, member.kota) if p) or '-'],
            ['Tempat, Tanggal Lahir', f'{member.tempat_lahir or "-"}, {format_date(member.tanggal_lahir)}'],
            ['Pekerjaan', member.pekerjaan or '-'],
            ['Identitas', f'{member.jenis_identitas or "-"} {member.nomor_identitas or ""}'.strip()],
            ['Anggota Sejak', format_date(member.created_at)],
        ]
        await self._reply(ctx, tabulate(fields, tablefmt='plain'))

    @commands.command(name='ringkasan', help='$ringkasan [refresh] Ringkasan pemasukan, pengeluaran dan notifikasi')
    async def ringkasan(self, ctx, refresh: str = ''):
        member = self._member(ctx)
        force = self._force(refresh)
        summary = await self._run(self.bot.data.fetch_summary, member.id, force)
        recent = await self._run(self.bot.data.fetch_transactions, member.id, force)
        unread = await self._run(self.bot.data.unread_count, member.id)

        lines = [
            f'Total Masuk  : {format_currency(summary.total_masuk)}',
            f'Total Keluar : {format_currency(summary.total_keluar)}',
            f'Selisih      : {format_currency(summary.selisih)}',
            f'Notifikasi belum dibaca: {unread}',
        ]
        if recent:
            table = tabulate(
                transaction_rows(recent[:5]),
                headers=['Tanggal', 'Jenis', 'Jumlah', 'Keterangan'],
                stralign='right',
            )
            lines += ['', 'Transaksi terakhir:', table]
        await self._reply(ctx, '\n'.join(lines))


async def setup(bot):
    await bot.add_cog(DashboardCog(bot))
    logger.info('dashboard is loaded')
