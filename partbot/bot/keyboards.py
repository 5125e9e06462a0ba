"""Inline keyboards and callback data identifiers."""

from telegram import ForceReply, InlineKeyboardButton, InlineKeyboardMarkup

from ..models import SearchMode
from .messages import (
    BUTTON_BACK,
    BUTTON_CHECK_BALANCE,
    BUTTON_GENERATE_COUPON,
    BUTTON_REDEEM,
    BUTTON_SETTINGS,
    BUTTON_TOP_UP,
    SEARCH_MODE_LABELS,
)

CHECK_BALANCE = "check_balance"
TOP_UP = "topup"
REDEEM_PROMPT = "redeem_prompt"
GENERATE_COUPON_PROMPT = "generate_coupon_prompt"
SEARCH_SETTINGS = "search_settings"
BACK_TO_MAIN_MENU = "back_to_main_menu"
SET_SEARCH_CONFIG_PREFIX = "set_search_config_"


def main_menu(is_admin: bool) -> InlineKeyboardMarkup:
    buttons = [
        [InlineKeyboardButton(BUTTON_CHECK_BALANCE, callback_data=CHECK_BALANCE)],
        [InlineKeyboardButton(BUTTON_TOP_UP, callback_data=TOP_UP)],
        [InlineKeyboardButton(BUTTON_REDEEM, callback_data=REDEEM_PROMPT)],
        [InlineKeyboardButton(BUTTON_SETTINGS, callback_data=SEARCH_SETTINGS)],
    ]
    if is_admin:
        buttons.append(
            [InlineKeyboardButton(BUTTON_GENERATE_COUPON, callback_data=GENERATE_COUPON_PROMPT)]
        )
    return InlineKeyboardMarkup(buttons)


def search_settings(current: SearchMode) -> InlineKeyboardMarkup:
    """Mode picker with a check mark on the active mode."""
    buttons = []
    for mode in SearchMode:
        label = SEARCH_MODE_LABELS[mode.value]
        if mode == current:
            label = f"✅ {label}"
        buttons.append(
            [InlineKeyboardButton(label, callback_data=f"{SET_SEARCH_CONFIG_PREFIX}{mode.value}")]
        )
    buttons.append([InlineKeyboardButton(BUTTON_BACK, callback_data=BACK_TO_MAIN_MENU)])
    return InlineKeyboardMarkup(buttons)


def insufficient_funds() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(BUTTON_TOP_UP, callback_data=TOP_UP)],
            [InlineKeyboardButton(BUTTON_REDEEM, callback_data=REDEEM_PROMPT)],
        ]
    )


def force_reply() -> ForceReply:
    return ForceReply(selective=True)
