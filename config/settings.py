"""Configuration management for the koperasi bot."""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Configuration settings for the koperasi bot.

    Secrets come from the environment, everything else has a default that
    can be overridden when constructing the dataclass directly.
    """

    # Discord Configuration (required)
    discord_token: str

    # Supabase Configuration (required)
    supabase_url: str
    supabase_key: str

    # Local session storage
    session_db_path: str = 'koperasi_session.db'

    # Bot
    command_prefix: str = '$'
    owner_id: int | None = None

    # Query cache
    cache_stale_seconds: int = 5 * 60

    # Business Rules
    due_soon_days: int = 3
    transaction_page_size: int = 10
    notification_limit: int = 50
    max_history_rows: int = 25

    # Logging
    log_file: str = 'koperasi.log'
    log_level: str = 'INFO'

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables.

        Returns:
            Settings: A Settings instance with values from environment variables.

        Raises:
            ValueError: If required environment variables are not set.
        """
        discord_token = os.getenv('DISCORD_TOKEN')
        supabase_url = os.getenv('SUPABASE_URL')
        supabase_key = os.getenv('SUPABASE_KEY')

        if not discord_token:
            raise ValueError("DISCORD_TOKEN environment variable is required")
        if not supabase_url:
            raise ValueError("SUPABASE_URL environment variable is required")
        if not supabase_key:
            raise ValueError("SUPABASE_KEY environment variable is required")

        owner_id = os.getenv('KOPERASI_OWNER_ID')

        return cls(
            discord_token=discord_token,
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            session_db_path=os.getenv('KOPERASI_SESSION_DB', 'koperasi_session.db'),
            command_prefix=os.getenv('KOPERASI_PREFIX', '$'),
            owner_id=int(owner_id) if owner_id else None,
            log_file=os.getenv('KOPERASI_LOG_FILE', 'koperasi.log'),
            log_level=os.getenv('KOPERASI_LOG_LEVEL', 'INFO'),
        )
