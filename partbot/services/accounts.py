"""User lifecycle: first contact, settings and balance top-ups."""

import logging

from ..exceptions import UserNotFoundError
from ..models import SearchMode, User
from ..storage import UserRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Creates users lazily and applies non-search balance changes."""

    def __init__(self, user_repository: UserRepository, trial_balance_cents: int):
        self.user_repository = user_repository
        self.trial_balance_cents = trial_balance_cents

    async def ensure_user(self, user_id: int, username: str | None) -> User:
        """Load the user, creating it with the trial balance on first contact."""
        user = await self.user_repository.get_or_create(
            user_id, username, self.trial_balance_cents
        )
        logger.debug("User %s obtained, balance %s", user_id, user.balance_cents)
        return user

    async def get_user(self, user_id: int) -> User:
        """Load an existing user.

        Raises:
            UserNotFoundError: If the user never contacted the bot.
        """
        user = await self.user_repository.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_search_mode(self, user_id: int, mode: SearchMode) -> User:
        """Persist a new search mode and return the updated user."""
        await self.user_repository.set_search_mode(user_id, mode)
        logger.info("User %s switched search mode to %s", user_id, mode.value)
        return await self.get_user(user_id)

    async def credit(self, user_id: int, username: str | None, amount_cents: int) -> int:
        """Add a paid amount to the balance.

        Returns:
            The new balance in cents.

        Raises:
            ValueError: If the amount is not positive.
        """
        if amount_cents <= 0:
            raise ValueError("Credit amount must be positive")

        user = await self.ensure_user(user_id, username)
        new_balance = user.balance_cents + amount_cents
        await self.user_repository.set_balance(user_id, new_balance)

        logger.info("Credited %s cents to user %s, balance %s", amount_cents, user_id, new_balance)
        return new_balance
