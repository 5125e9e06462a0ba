"""Coupon generation and redemption."""

import logging

from ..exceptions import CouponAlreadyActivatedError, CouponNotFoundError
from ..models import Coupon, dollars_to_cents, generate_coupon_code, normalize_coupon_code
from ..storage import CouponRepository, UserRepository
from .accounts import AccountService

logger = logging.getLogger(__name__)


class CouponService:
    """Issues prepaid coupons and turns them into balance."""

    def __init__(
        self,
        coupon_repository: CouponRepository,
        user_repository: UserRepository,
        account_service: AccountService,
    ):
        self.coupon_repository = coupon_repository
        self.user_repository = user_repository
        self.account_service = account_service

    async def generate(self, value_dollars: str | float) -> Coupon:
        """Create a new coupon worth the given dollar amount.

        Raises:
            InvalidCouponValueError: If the amount is not a positive number.
        """
        value_cents = dollars_to_cents(value_dollars)
        coupon = Coupon(code=generate_coupon_code(), value_cents=value_cents)
        return await self.coupon_repository.create(coupon)

    async def redeem(self, user_id: int, username: str | None, raw_code: str) -> tuple[int, int]:
        """Spend a coupon on the user's balance.

        Returns:
            Tuple of (added cents, new balance cents).

        Raises:
            CouponNotFoundError: If no coupon has this code.
            CouponAlreadyActivatedError: If the coupon was already spent.
        """
        try:
            code = normalize_coupon_code(raw_code)
        except ValueError as e:
            raise CouponNotFoundError(raw_code) from e

        logger.info("Redeeming coupon %s for user %s", code, user_id)

        coupon = await self.coupon_repository.find_by_code(code)
        if coupon is None:
            raise CouponNotFoundError(code)
        if coupon.is_activated:
            raise CouponAlreadyActivatedError(code)

        user = await self.account_service.ensure_user(user_id, username)

        if not await self.coupon_repository.activate(code, user_id):
            raise CouponAlreadyActivatedError(code)

        new_balance = user.balance_cents + coupon.value_cents
        await self.user_repository.set_balance(user_id, new_balance)

        logger.info(
            "Coupon %s redeemed by user %s: +%s, balance %s",
            code,
            user_id,
            coupon.value_cents,
            new_balance,
        )
        return coupon.value_cents, new_balance
