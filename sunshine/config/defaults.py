"""Default provider endpoints and forecast lengths."""

from sunshine.config.schema import ProviderName
from sunshine.ingest.accuweather_client import ACCUWEATHER_BASE_URL
from sunshine.ingest.openweather_client import OPENWEATHER_BASE_URL

DEFAULT_BASE_URLS: dict[ProviderName, str] = {
    ProviderName.ACCUWEATHER: ACCUWEATHER_BASE_URL,
    ProviderName.OPENWEATHERMAP: OPENWEATHER_BASE_URL,
}

API_KEY_ENV_VAR = "SUNSHINE_API_KEY"
