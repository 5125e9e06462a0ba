"""Configuration management for the part search bot.

Handles all application configuration including environment variables, the
YAML pricing file, and default settings. Provides structured configuration
classes for the different parts of the application (bot, eBay, pricing,
payments, storage and caching).
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings


class PricingConfig(BaseSettings):
    """Credit pricing parameters, all amounts in cents.

    Attributes:
        trial_balance_cents: Starting balance granted to new users.
        cost_per_request_cents: Price of a single part number lookup.
    """
    trial_balance_cents: int = Field(default=1000, validation_alias="TRIAL_BALANCE_CENTS")
    cost_per_request_cents: int = Field(default=10, validation_alias="COST_PER_REQUEST_CENTS")


class PaymentConfig(BaseSettings):
    """Telegram payments settings.

    Attributes:
        provider_token: Payment provider token, payments are disabled without it.
        amount_cents: Price of one balance top-up.
        currency: Invoice currency code.
    """
    provider_token: str | None = Field(default=None, validation_alias="STRIPE_PROVIDER_TOKEN")
    amount_cents: int = 2000
    currency: str = "USD"

    @property
    def enabled(self) -> bool:
        """Whether invoices can be issued."""
        return bool(self.provider_token)


class EbayConfig(BaseSettings):
    """eBay API credentials and endpoints.

    Attributes:
        client_id: Application client id (also used as Finding API app id).
        client_secret: Application client secret for OAuth.
        environment: 'production' or 'sandbox'.
        marketplace_id: Marketplace header sent to the Browse API.
        search_limit: Listings requested per keyword.
        max_concurrent: Keywords searched in parallel within one request.
        search_timeout: Seconds before a whole search is abandoned, None to wait.
    """
    client_id: str = Field(default="", validation_alias="EBAY_CLIENT_ID")
    client_secret: str = Field(default="", validation_alias="EBAY_CLIENT_SECRET")
    environment: str = Field(default="production", validation_alias="EBAY_ENVIRONMENT")
    marketplace_id: str = Field(default="EBAY_US", validation_alias="EBAY_MARKETPLACE_ID")
    search_limit: int = Field(default=1, validation_alias="EBAY_SEARCH_LIMIT")
    max_concurrent: int = Field(default=5, validation_alias="EBAY_MAX_CONCURRENT")
    search_timeout: float | None = Field(default=None, validation_alias="EBAY_SEARCH_TIMEOUT")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def browse_api_url(self) -> str:
        if self.is_production:
            return "https://api.ebay.com/buy/browse/v1"
        return "https://api.sandbox.ebay.com/buy/browse/v1"

    @property
    def finding_api_url(self) -> str:
        if self.is_production:
            return "https://svcs.ebay.com/services/search/FindingService/v1"
        return "https://svcs.sandbox.ebay.com/services/search/FindingService/v1"

    @property
    def oauth_url(self) -> str:
        if self.is_production:
            return "https://api.ebay.com/identity/v1/oauth2/token"
        return "https://api.sandbox.ebay.com/identity/v1/oauth2/token"


class DatabaseConfig(BaseSettings):
    """SQLite storage settings.

    Attributes:
        path: Path to the SQLite database file.
    """
    path: str = Field(default="data/bot_database.sqlite", validation_alias="DATABASE_PATH")


class CacheConfig(BaseSettings):
    """Redis cache settings for keyword lookups.

    Attributes:
        redis_url: Redis server URL.
        enabled: Whether lookups are cached at all.
        keyword_ttl: Lifetime of a cached keyword result in seconds.
    """
    redis_url: str = Field(default="redis://localhost:6379", validation_alias="REDIS_URL")
    enabled: bool = Field(default=False, validation_alias="CACHE_ENABLED")
    keyword_ttl: int = Field(default=21600, validation_alias="CACHE_KEYWORD_TTL")


class BotConfig(BaseSettings):
    """Main Telegram bot configuration.

    Attributes:
        bot_token: Telegram bot API token from environment.
        admin_user_id: Telegram user id of the administrator.
        port: Server port for webhook mode.
        listen_host: Interface the webhook server binds to.
        railway_domain: Railway public domain for webhooks.
        railway_url: Railway URL for webhooks (fallback).
        timeout: HTTP request timeout in seconds.
        log_level: Root logging level name.
    """
    bot_token: str = Field(default="", validation_alias="BOT_TOKEN")
    admin_user_id: int = Field(default=0, validation_alias="ADMIN_USER_ID")
    port: int = Field(default=8000, validation_alias="PORT")
    listen_host: str = Field(default="127.0.0.1", validation_alias="BOT_LISTEN_HOST")
    railway_domain: str | None = Field(default=None, validation_alias="RAILWAY_PUBLIC_DOMAIN")
    railway_url: str | None = Field(default=None, validation_alias="RAILWAY_URL")
    timeout: int = Field(default=20, validation_alias="HTTP_TIMEOUT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def webhook_domain(self) -> str | None:
        """Get webhook domain for Railway deployment.

        Returns:
            Domain string if available, None for polling mode.
        """
        return self.railway_domain or self.railway_url

    @property
    def use_webhook(self) -> bool:
        """Determine if webhook mode should be used.

        Returns:
            True if webhook domain is configured, False for polling mode.
        """
        return bool(self.webhook_domain)

    def is_admin(self, user_id: int) -> bool:
        """Check whether a Telegram user is the configured administrator."""
        return bool(self.admin_user_id) and user_id == self.admin_user_id


class Config:
    """Application configuration manager.

    Centralizes loading of environment variables, the optional pricing YAML
    file and default values. Environment variables win over the YAML file.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to partbot/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.bot = BotConfig()
        self.ebay = EbayConfig()
        self.payments = PaymentConfig()
        self.database = DatabaseConfig()
        self.cache = CacheConfig()
        self.pricing = self._load_pricing()

    def _load_pricing(self) -> PricingConfig:
        """Load pricing from pricing.yml, letting environment variables override it.

        Returns:
            PricingConfig built from the file values and the environment.
        """
        defaults = PricingConfig()
        pricing_path = self.config_dir / "pricing.yml"
        if not pricing_path.exists():
            return defaults

        with open(pricing_path) as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        explicit = defaults.model_fields_set
        values = {
            "trial_balance_cents": data.get("trial_balance_cents", defaults.trial_balance_cents),
            "cost_per_request_cents": data.get(
                "cost_per_request_cents", defaults.cost_per_request_cents
            ),
        }
        for name in explicit:
            values[name] = getattr(defaults, name)

        return PricingConfig.model_validate(
            {
                "TRIAL_BALANCE_CENTS": values["trial_balance_cents"],
                "COST_PER_REQUEST_CENTS": values["cost_per_request_cents"],
            }
        )


# Global configuration instance
config = Config()
