from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from roundclip.modules.base import MaterializePolicy, ToolTimeouts


class BotConfig(BaseSettings):
    """Configuration for roundclip bot"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Telegram
    telegram_bot_token: str = Field(..., alias="TELEGRAM_BOT_TOKEN")
    default_language: str = Field("ru", alias="DEFAULT_LANGUAGE")

    # Paths
    work_dir: Path = Field(Path("temp"), alias="WORK_DIR")

    # Limits
    max_duration_seconds: int = Field(600, alias="MAX_DURATION_SECONDS")
    max_upload_bytes: int = Field(50 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # Pending selections
    pending_ttl_seconds: float = Field(3600, alias="PENDING_TTL_SECONDS")
    pending_max_entries: int = Field(10000, alias="PENDING_MAX_ENTRIES")

    # External tools
    ytdlp_binary: str = Field("yt-dlp", alias="YTDLP_BINARY")
    ffmpeg_binary: str = Field("ffmpeg", alias="FFMPEG_BINARY")
    ffprobe_binary: str = Field("ffprobe", alias="FFPROBE_BINARY")
    probe_timeout: float = Field(60, alias="PROBE_TIMEOUT")
    download_timeout: float = Field(600, alias="DOWNLOAD_TIMEOUT")
    transcode_timeout: float = Field(600, alias="TRANSCODE_TIMEOUT")

    # Logs
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @property
    def policy(self) -> MaterializePolicy:
        return MaterializePolicy(
            max_duration_seconds=self.max_duration_seconds,
            max_upload_bytes=self.max_upload_bytes,
        )

    @property
    def timeouts(self) -> ToolTimeouts:
        return ToolTimeouts(
            probe=self.probe_timeout,
            download=self.download_timeout,
            transcode=self.transcode_timeout,
        )

    def model_post_init(self, __context):
        # Ensure directories exist
        self.work_dir.mkdir(parents=True, exist_ok=True)
