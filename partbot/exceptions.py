"""Domain errors raised by the part search bot."""


class PartBotError(Exception):
    """Base class for all bot errors."""


class UserNotFoundError(PartBotError):
    def __init__(self, user_id: int):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class CouponNotFoundError(PartBotError):
    def __init__(self, code: str):
        super().__init__(f"Coupon not found: {code}")
        self.code = code


class CouponAlreadyActivatedError(PartBotError):
    def __init__(self, code: str):
        super().__init__(f"Coupon already activated: {code}")
        self.code = code


class InvalidCouponValueError(PartBotError):
    def __init__(self, value: str):
        super().__init__(f"Coupon value must be a positive amount, got {value!r}")
        self.value = value


class InvalidSearchModeError(PartBotError):
    def __init__(self, value: str):
        super().__init__(f"Invalid search config key: {value}")
        self.value = value


class EbayApiError(PartBotError):
    """eBay request failed."""


class EbayAuthError(EbayApiError):
    """OAuth application token could not be obtained."""


class EbayRateLimitError(EbayApiError):
    """eBay rejected the call with HTTP 429."""
