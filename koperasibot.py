import asyncio
import logging

import discord
from discord.ext import commands, tasks
from dotenv import load_dotenv

from config.settings import Settings
from koperasi.backend import connect
from koperasi.context.auth_context import AuthContext
from koperasi.context.data_context import DataContext
from koperasi.context.query_cache import QueryCache
from koperasi.logger import setup_logging
from koperasi.repositories.anggota_repo import AkunRepository, AnggotaRepository
from koperasi.repositories.notifikasi_repo import NotifikasiRepository
from koperasi.repositories.pembiayaan_repo import PembiayaanRepository
from koperasi.repositories.tabungan_repo import JenisTabunganRepository, TabunganRepository
from koperasi.repositories.transaksi_repo import TransaksiRepository
from koperasi.services.auth_service import AuthService
from koperasi.services.loan_notification_service import LoanNotificationService
from koperasi.services.notification_service import NotificationService
from koperasi.services.pembiayaan_service import PembiayaanService
from koperasi.services.tabungan_service import TabunganService
from koperasi.services.transaksi_service import TransaksiService
from koperasi.storage import SessionStorage

logger = logging.getLogger('koperasi.bot')

extensions = (
    "cogs.auth",
    "cogs.dashboard",
    "cogs.tabungan",
    "cogs.pinjaman",
    "cogs.notifikasi",
)


class KoperasiBot(commands.Bot):
    def __init__(self, settings: Settings, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings = settings

        client = connect(settings.supabase_url, settings.supabase_key)
        storage = SessionStorage.open(settings.session_db_path)

        tabungan_repo = TabunganRepository(client)
        transaksi_repo = TransaksiRepository(client)
        pembiayaan_repo = PembiayaanRepository(client)
        notifikasi_repo = NotifikasiRepository(client)

        self.auth_service = AuthService(AkunRepository(client), AnggotaRepository(client), storage)
        self.tabungan_service = TabunganService(JenisTabunganRepository(client), tabungan_repo, transaksi_repo)
        self.transaksi_service = TransaksiService(transaksi_repo)
        self.pembiayaan_service = PembiayaanService(pembiayaan_repo)
        self.notification_service = NotificationService(notifikasi_repo)
        self.loan_notification_service = LoanNotificationService(
            pembiayaan_repo, notifikasi_repo, self.notification_service, settings.due_soon_days
        )

        self.auth = AuthContext(self.auth_service, storage)
        self.data = DataContext(
            QueryCache(settings.cache_stale_seconds),
            self.transaksi_service,
            self.notification_service,
            self.loan_notification_service,
            self.tabungan_service,
            self.pembiayaan_service,
            storage,
            transaction_limit=settings.transaction_page_size,
            notification_limit=settings.notification_limit,
        )

    async def setup_hook(self):
        for extension in extensions:
            await self.load_extension(extension)
        restored = await asyncio.to_thread(self.auth.restore_sessions)
        logger.info('%d sessions restored', restored)
        self.daily_loan_check.start()

    @tasks.loop(hours=24)
    async def daily_loan_check(self):
        await asyncio.to_thread(self.loan_notification_service.check_and_create_due_date_notifications)

    async def on_ready(self):
        logger.info('Logged in as %s', self.user)


def main():
    load_dotenv()
    settings = Settings.load()
    setup_logging(settings.log_file, settings.log_level)

    intents = discord.Intents.default()
    intents.message_content = True
    bot = KoperasiBot(
        settings,
        command_prefix=settings.command_prefix,
        owner_id=settings.owner_id,
        intents=intents,
    )
    bot.run(settings.discord_token, log_handler=None)


if __name__ == '__main__':
    main()
