from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, Optional


class ScoringWeights(BaseModel):
    """Bonus points and thresholds used when ranking spots for a user."""

    rising_tide_bonus: float = 10
    tide_range_min: float = 2  # feet
    tide_range_max: float = 6  # feet
    tide_range_bonus: float = 5
    wave_height_min: float = 2  # feet
    wave_height_max: float = 6  # feet
    wave_height_bonus: float = 10
    swell_period_min: float = 8  # seconds
    swell_period_bonus: float = 5
    wind_speed_max: float = 10  # mph
    light_wind_bonus: float = 10
    wind_direction_min: float = 180  # degrees
    wind_direction_max: float = 360  # degrees
    wind_direction_bonus: float = 5


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "KookCast Forecast Engine"

    # Product timezone. Business dates and send times are computed here, not in UTC.
    business_timezone: str = "America/Los_Angeles"
    send_hour: int = 5
    send_minute: int = 0

    # Static catalogs
    data_dir: str = "data"
    buoy_stations_file: str = "data/buoy_stations.json"
    surf_spots_file: str = "data/surf_spots.json"
    users_file: str = "data/users.json"
    lock_dir: str = "data/locks"

    # NDBC realtime text feed
    ndbc_base_url: str = "https://www.ndbc.noaa.gov/data/realtime2/"

    # WorldTides heights API (queried by spot coordinate)
    worldtides_base_url: str = "https://www.worldtides.info/api/v3"
    worldtides_api_key: Optional[str] = None
    tide_history_hours: int = 24
    tide_history_step_seconds: int = 3600

    # NOAA CO-OPS predictions (queried by station id)
    coops_base_url: str = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
    coops_params: Dict = {
        "product": "predictions",
        "datum": "MLLW",
        "units": "english",
        "time_zone": "gmt",
        "format": "json"
    }

    # Open-Meteo
    marine_base_url: str = "https://marine-api.open-meteo.com/v1/marine"
    weather_base_url: str = "https://api.open-meteo.com/v1/forecast"

    # Narrative generation
    openai_base_url: str = "https://api.openai.com/v1/chat/completions"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"

    # Email dispatch
    sendgrid_base_url: str = "https://api.sendgrid.com/v3/mail/send"
    sendgrid_api_key: Optional[str] = None
    sendgrid_from_email: str = "forecast@kook-cast.com"
    sendgrid_template_id: str = ""
    emails_per_minute: int = 120
    email_batch_size: int = 50
    email_batch_pause: int = 10

    # Seconds allowed for any single outbound call
    request_timeout: float = 15.0

    # A running lock older than this is treated as abandoned
    stale_lock_minutes: int = 120

    premium_spot_limit: int = 5
    ranked_spot_limit: int = 3

    scoring: ScoringWeights = ScoringWeights()

    cache: Dict[str, str] = {
        "prefix": "kookcast"
    }

    def get_cache_ttl(self) -> Dict[str, Optional[int]]:
        """Get cache TTL values in seconds."""
        return {
            "buoy_report": 1800,        # 30 minutes (NDBC updates at :26 and :56)
            "spot_conditions": 900,     # 15 minutes, long enough to cover one run
            "tide_history": 3600,       # 1 hour
            "email_rate": 60,           # rolling minute window
        }

    model_config = SettingsConfigDict(
        env_prefix="kookcast_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

settings = Settings()
