import asyncio
import logging

from discord.ext import commands

from cogs.base import KoperasiCog
from koperasi.services.auth_service import PIN_LENGTH

logger = logging.getLogger('koperasi.cogs.auth')


class AuthCog(KoperasiCog, name='auth'):
    """Login, logout, registration and PIN commands."""

    @commands.command(name='login', help='$login <telepon> <pin> Masuk ke akun koperasi (hanya lewat DM)')
    @commands.dm_only()
    async def login(self, ctx, phone: str, pin: str):
        owner = self._owner(ctx)
        state = await self._run(self.bot.auth.sign_in, owner, phone, pin)
        await self._reply(ctx, f'Selamat datang, {state.member.nama}!')

    @commands.command(name='logout', help='$logout Keluar dari akun')
    async def logout(self, ctx):
        owner = self._owner(ctx)
        state = self.bot.auth.state(owner)
        if state.member is not None:
            self.bot.data.clear_cache(state.member.id)
        await self._run(self.bot.auth.logout, owner)
        await self._reply(ctx, 'Anda telah keluar')

    async def _ask_pin(self, ctx, prompt):
        await self._reply(ctx, prompt)

        def check(message):
            return message.author == ctx.author and message.channel == ctx.channel

        try:
            message = await self.bot.wait_for('message', timeout=120.0, check=check)
        except asyncio.TimeoutError:
            return None
        return message.content.strip()

    @commands.command(name='daftar', help='$daftar "<nama>" <rekening> <telepon> Daftarkan nomor telepon ke keanggotaan (hanya lewat DM)')
    @commands.dm_only()
    async def daftar(self, ctx, nama: str, rekening: str, phone: str):
        auth_service = self.bot.auth_service
        member = await self._run(auth_service.validate_member, nama, rekening)
        if member is None:
            await self._reply(ctx, 'Data anggota tidak ditemukan. Periksa kembali nama dan nomor rekening Anda.')
            return

        existing = await self._run(auth_service.find_account_by_member, member.id)
        if existing is not None and existing.has_pin:
            await self._run(auth_service.register, member.id, phone)
            await self._reply(ctx, f'Nomor telepon terdaftar. Akun Anda sudah memiliki PIN, silakan masuk dengan {ctx.prefix}login')
            return

        pin = await self._ask_pin(ctx, f'Buat PIN {PIN_LENGTH} digit:')
        if pin is None:
            await self._reply(ctx, 'Waktu habis')
            return
        confirm = await self._ask_pin(ctx, 'Masukkan ulang PIN:')
        if confirm != pin:
            await self._reply(ctx, 'PIN konfirmasi tidak sesuai. Silakan coba lagi.')
            return

        await self._run(auth_service.register, member.id, phone, pin)
        logger.info('Member %s registered phone for owner %s', member.id, self._owner(ctx))
        await self._run(self.bot.auth.sign_in, self._owner(ctx), phone, pin)
        await self._reply(ctx, f'Pendaftaran berhasil. Selamat datang, {member.nama}!')

    @commands.command(name='pin', help='$pin <lama> <baru> <konfirmasi> Ganti PIN (hanya lewat DM)')
    @commands.dm_only()
    async def pin(self, ctx, old_pin: str, new_pin: str, confirm_pin: str):
        account = self.bot.auth.require_account(self._owner(ctx))
        await self._run(self.bot.auth_service.change_pin, account.id, old_pin, new_pin, confirm_pin)
        await self._reply(ctx, 'PIN berhasil diubah')


async def setup(bot):
    await bot.add_cog(AuthCog(bot))
    logger.info('auth is loaded')
