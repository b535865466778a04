from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    bot_prefix: str = Field(default="!", description="Command prefix")
    log_level: str = Field(default="INFO", description="Logging level")

    # Resolution chain
    history_scan_limit: int = Field(default=50, description="Messages scanned newest-first for an image")
    max_input_bytes: int = Field(default=250_000_000, description="Byte ceiling for downloaded input media")
    http_timeout: float = Field(default=10.0, description="Timeout in seconds for collaborator HTTP requests")

    # External sources
    emoji_descriptor_url: str = Field(
        default="https://bignutty.gitlab.io/emojipedia-data/data/{}.json",
        description="Emoji descriptor JSON url, formatted with the codepoint identifier",
    )
    sticker_cdn_url: str = Field(
        default="https://cdn.discordapp.com/stickers/{}.png",
        description="PNG sticker url, formatted with the sticker id",
    )
    redirect_page_prefix: str = Field(
        default="https://tenor.com/view",
        description="Links starting with this are view pages, not direct media",
    )
    redirect_media_pattern: str = Field(
        default=r"https://media\d*\.tenor\.com/[\w\-]+/[^\s\"'<>]+\.gif",
        description="Pattern of the direct media link embedded in a view page",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = EngineSettings()
