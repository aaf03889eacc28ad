import asyncio
import functools
import logging

from discord.ext import commands

from koperasi.models.exceptions import KoperasiError

logger = logging.getLogger('koperasi.cogs')

GENERIC_ERROR = 'Terjadi kesalahan. Silakan coba lagi nanti.'
REFRESH = 'refresh'


class KoperasiCog(commands.Cog):
    """Shared helpers for the member-facing cogs."""

    def __init__(self, bot):
        self.bot = bot

    @staticmethod
    def _owner(ctx) -> str:
        return str(ctx.author.id)

    def _member(self, ctx):
        """Raises NotAuthenticatedError when the author has no session."""
        return self.bot.auth.require_member(self._owner(ctx))

    @staticmethod
    def _force(arg) -> bool:
        return str(arg).lower() == REFRESH

    async def _run(self, func, *args, **kwargs):
        """Run a blocking backend call off the event loop."""
        return await asyncio.to_thread(functools.partial(func, *args, **kwargs))

    async def _reply(self, ctx, text):
        return await ctx.send('```' + text + '```')

    async def _confirm(self, ctx, text, timeout=120.0) -> bool:
        """Ask the author to confirm with ✅ or cancel with ❌."""
        msg = await self._reply(ctx, text + '\nTekan ✅ untuk konfirmasi, ❌ untuk batal.')
        await asyncio.gather(msg.add_reaction('✅'), msg.add_reaction('❌'))

        def check(reaction, user):
            return user == ctx.author and reaction.message.id == msg.id and str(reaction.emoji) in ('✅', '❌')

        try:
            reaction, _ = await self.bot.wait_for('reaction_add', timeout=timeout, check=check)
        except asyncio.TimeoutError:
            await self._reply(ctx, 'Waktu habis')
            return False
        if str(reaction.emoji) == '❌':
            await self._reply(ctx, 'Dibatalkan')
            return False
        return True

    async def cog_command_error(self, ctx, error):
        if isinstance(error, commands.CommandInvokeError) and isinstance(error.original, KoperasiError):
            await self._reply(ctx, str(error.original))
        elif isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await self._reply(ctx, f'Perintah tidak lengkap. Gunakan: {ctx.prefix}{ctx.command.name} {ctx.command.signature}')
        elif isinstance(error, commands.CheckFailure):
            await self._reply(ctx, 'Perintah ini hanya bisa digunakan lewat pesan langsung (DM).')
        else:
            logger.error('Command %s failed', ctx.command, exc_info=error)
            await self._reply(ctx, GENERIC_ERROR)
