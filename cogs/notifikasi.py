import logging

import discord
from discord.ext import commands
from tabulate import tabulate

from cogs.base import KoperasiCog
from koperasi.formatting import format_currency, format_date, format_datetime, format_short_date, hex_to_int
from koperasi.models.exceptions import KoperasiError
from koperasi.models.notifikasi import FILTERS
from koperasi.services.notification_service import NotificationService

logger = logging.getLogger('koperasi.cogs.notifikasi')

MAX_LISTED = 15


class NotifikasiCog(KoperasiCog, name='notifikasi'):
    """Notification inbox commands."""

    async def _visible(self, ctx, force=False):
        member = self._member(ctx)
        rows = await self._run(self.bot.data.fetch_notifications, member.id, force)
        active = self.bot.data.get_notification_filter(self._owner(ctx))
        return member, active, NotificationService.filter_notifications(rows, active)

    @commands.command(name='notifikasi', help='$notifikasi [all|unread|transaksi|pengumuman|sistem|jatuh_tempo] [refresh] Kotak notifikasi')
    async def notifikasi(self, ctx, *args: str):
        force = False
        for arg in args:
            if self._force(arg):
                force = True
            elif arg.lower() in FILTERS:
                await self._run(self.bot.data.set_notification_filter, self._owner(ctx), arg.lower())
            else:
                await self._reply(ctx, 'Filter tidak dikenal. Pilihan: ' + ', '.join(FILTERS))
                return

        member, active, rows = await self._visible(ctx, force)
        unread = await self._run(self.bot.data.unread_count, member.id)
        if not rows:
            await self._reply(ctx, f'Tidak ada notifikasi ({active})')
            return
        table = tabulate(
            [
                [i, '•' if not n.is_read else '', n.type_info.name, n.judul[:32], format_short_date(n.created_at)]
                for i, n in enumerate(rows[:MAX_LISTED], start=1)
            ],
            headers=['No', '', 'Jenis', 'Judul', 'Tanggal'],
        )
        await self._reply(ctx, f'Filter: {active} | Belum dibaca: {unread}\n{table}')

    @commands.command(name='baca', help='$baca <no|id> Baca satu notifikasi')
    async def baca(self, ctx, ref: str):
        member, _, rows = await self._visible(ctx)
        if ref.isdigit() and 1 <= int(ref) <= len(rows):
            notifikasi = rows[int(ref) - 1]
        else:
            notifikasi = next((n for n in rows if n.id == ref), None)
        if notifikasi is None:
            raise KoperasiError('Notifikasi tidak ditemukan')

        info = notifikasi.type_info
        em = discord.Embed(title=notifikasi.judul, description=notifikasi.pesan, color=hex_to_int(info.color))
        em.set_author(name=info.name)
        data = notifikasi.data or {}
        if 'installmentAmount' in data:
            em.add_field(name='Angsuran', value=format_currency(data['installmentAmount']))
            em.add_field(name='Tanggal Angsuran', value=format_date(data.get('installmentDate')))
            em.add_field(name='Sisa Pembayaran', value=format_currency(data.get('remainingPayment')))
        em.set_footer(text=format_datetime(notifikasi.created_at))
        await ctx.send(embed=em)

        if not notifikasi.is_read:
            await self._run(self.bot.data.mark_notification_as_read, member.id, notifikasi.id)

    @commands.command(name='baca-semua', help='$baca-semua Tandai semua notifikasi sudah dibaca')
    async def baca_semua(self, ctx):
        member = self._member(ctx)
        if await self._run(self.bot.data.mark_all_notifications_as_read, member.id):
            await self._reply(ctx, 'Semua notifikasi telah ditandai sudah dibaca')
        else:
            await self._reply(ctx, 'Gagal menandai notifikasi')

    @commands.command(name='jatuh-tempo', help='$jatuh-tempo Pengingat angsuran pinjaman')
    async def jatuh_tempo(self, ctx):
        member = self._member(ctx)
        rows = await self._run(self.bot.notification_service.get_jatuh_tempo_notifications, member.id)
        if not rows:
            await self._reply(ctx, 'Tidak ada pengingat jatuh tempo')
            return
        lines = [f'{format_short_date(n.created_at)}  {n.judul}\n  {n.pesan}' for n in rows[:MAX_LISTED]]
        await self._reply(ctx, '\n'.join(lines))


async def setup(bot):
    await bot.add_cog(NotifikasiCog(bot))
    logger.info('notifikasi is loaded')
