"""Configuration objects for the gym class booker."""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import BookingRequest

Variant = Literal["api", "timetable"]

DEFAULT_BASE_URL = "https://www.virginactive.co.uk"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/48.0.2564.23 Mobile Safari/537.36"
)


class SiteConfig(BaseModel):
    """Everything a :class:`~gym_class_booker.gym_client.GymClient` needs to talk to the site."""

    model_config = ConfigDict(frozen=True)

    variant: Variant = "api"
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT

    login_form_uri: str = "login"
    username_field: str = "UserName"
    password_field: str = "Password"
    remember_me_field: str = "RememberMe"
    session_cookies: Tuple[str, ...] = (".AspNet.Cookies", "va-auth", "SF-TokenId")

    # JSON API
    club_list_uri: str = "api/club/getclubs"
    class_list_uri: str = "api/club/getclubtimetable"
    book_class_uri: str = "api/booking/bookclass"

    # Legacy timetable pages
    timetable_uri: str = "clubs/{slug}/timetable"
    booking_uri: str = "api/sitecore/VaClub/ViewTimetableBook"
    rendering_id: str = "064618dd-2b8d-4488-8fa0-57364f55aca0"

    @classmethod
    def for_variant(cls, variant: Variant, **overrides: object) -> "SiteConfig":
        """Defaults for ``variant`` with ``overrides`` applied on top."""
        defaults: dict[str, object] = {"variant": variant}
        if variant == "timetable":
            defaults.update(
                username_field="Username",
                session_cookies=(".ASPXAUTH", "_user"),
            )
        defaults.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**defaults)

    @property
    def default_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "*/*",
            "User-Agent": self.user_agent,
        }
        if self.variant == "timetable":
            headers["X-Requested-With"] = "XMLHttpRequest"
            headers["Referer"] = f"{self.base_url.rstrip('/')}/{self.login_form_uri}"
        return headers


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    app_name: str = Field("gym-class-booker")
    username: str = Field(...)
    password: SecretStr = Field(...)
    club_name: str = Field(...)
    class_name: str = Field(...)
    class_date: str = Field("one week later")
    class_time: str = Field(...)

    variant: Variant = Field("api")
    base_url: str = Field(DEFAULT_BASE_URL)
    timeout_seconds: float = Field(10.0)
    login_form_uri: Optional[str] = Field(None)
    club_list_uri: Optional[str] = Field(None)
    class_list_uri: Optional[str] = Field(None)
    book_class_uri: Optional[str] = Field(None)

    telegram_bot_token: Optional[SecretStr] = Field(None)
    telegram_chat_id: Optional[str] = Field(None)
    environment: str = Field("production")

    model_config = SettingsConfigDict(
        env_prefix="GYM_BOOKER_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def site_config(self) -> SiteConfig:
        """Build the site configuration handed to the gym client."""
        return SiteConfig.for_variant(
            self.variant,
            base_url=self.base_url,
            timeout_seconds=self.timeout_seconds,
            login_form_uri=self.login_form_uri,
            club_list_uri=self.club_list_uri,
            class_list_uri=self.class_list_uri,
            book_class_uri=self.book_class_uri,
        )

    def booking_request(self) -> BookingRequest:
        """The class this run should book."""
        return BookingRequest(
            club_name=self.club_name,
            class_name=self.class_name,
            date=self.class_date,
            time=self.class_time,
            username=self.username,
            password=self.password,
        )

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def telegram_api_endpoint(self) -> str:
        """Base Telegram Bot API endpoint."""
        if self.telegram_bot_token is None:
            raise RuntimeError("Telegram bot token is not configured")
        return f"https://api.telegram.org/bot{self.telegram_bot_token.get_secret_value()}"
