"""Dependency-injection container.

Wires storage, eBay clients and services together from the global config.
Tests swap collaborators with ``container.<provider>.override(...)``.
"""

from dependency_injector import containers, providers

from ..config import config as app_config
from ..ebay import AppTokenCache, BrowseApiClient, FindingApiClient
from ..services.accounts import AccountService
from ..services.cache_service import CacheService
from ..services.coupons import CouponService
from ..services.report import ExcelReportGenerator
from ..services.search_gateway import EbaySearchGateway
from ..services.search_processor import SearchProcessor
from ..storage import CouponRepository, Database, UserRepository


class Container(containers.DeclarativeContainer):
    """DI container for the application."""

    config = providers.Object(app_config)

    # Storage
    database = providers.Singleton(Database, db_path=config.provided.database.path)
    user_repository = providers.Singleton(UserRepository, database=database)
    coupon_repository = providers.Singleton(CouponRepository, database=database)

    # eBay
    token_cache = providers.Singleton(AppTokenCache)
    browse_client = providers.Singleton(
        BrowseApiClient, config=config.provided.ebay, token_cache=token_cache
    )
    finding_client = providers.Singleton(FindingApiClient, config=config.provided.ebay)

    # Services
    cache_service = providers.Singleton(CacheService, config=config.provided.cache)
    search_gateway = providers.Singleton(
        EbaySearchGateway,
        browse_client=browse_client,
        finding_client=finding_client,
        cache_service=cache_service,
        max_concurrent=config.provided.ebay.max_concurrent,
        http_timeout=config.provided.bot.timeout,
    )
    report_generator = providers.Singleton(ExcelReportGenerator)
    search_processor = providers.Singleton(
        SearchProcessor,
        balance_store=user_repository,
        gateway=search_gateway,
        report_generator=report_generator,
        cost_per_request_cents=config.provided.pricing.cost_per_request_cents,
        search_timeout=config.provided.ebay.search_timeout,
    )
    account_service = providers.Singleton(
        AccountService,
        user_repository=user_repository,
        trial_balance_cents=config.provided.pricing.trial_balance_cents,
    )
    coupon_service = providers.Singleton(
        CouponService,
        coupon_repository=coupon_repository,
        user_repository=user_repository,
        account_service=account_service,
    )


container = Container()
