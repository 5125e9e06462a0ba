"""Telegram bot handlers.

Thin adapters between python-telegram-bot updates and the services held by
the DI container: search requests go to the search processor, coupon prompts
to the coupon service, menu buttons and payments to the account service.
"""

import logging

from telegram import LabeledPrice, Message, Update
from telegram import User as TelegramUser
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from ..config import config
from ..core.container import container
from ..exceptions import (
    CouponAlreadyActivatedError,
    CouponNotFoundError,
    InvalidCouponValueError,
    InvalidSearchModeError,
)
from ..models import SearchMode, format_cents
from ..services.search_processor import (
    InsufficientFunds,
    NoItemsFound,
    SearchFailed,
    SearchSucceeded,
    parse_part_numbers,
)
from . import keyboards
from .messages import (
    ADMIN_ONLY,
    CALLBACK_ERROR,
    COUPON_CREATE_ERROR,
    COUPON_CREATED,
    COUPON_INVALID_AMOUNT,
    COUPON_NOT_FOUND,
    COUPON_REDEEMED,
    CURRENT_BALANCE,
    ENTER_COUPON_CODE,
    ENTER_COUPON_VALUE,
    GENERIC_ERROR,
    INVOICE_DESCRIPTION,
    INVOICE_TITLE,
    MAIN_MENU,
    PAYMENT_SUCCESS,
    PAYMENTS_DISABLED,
    PROCESSING,
    SEARCH_COMPLETE,
    SEARCH_SETTINGS_PROMPT,
    SEARCHING,
    SETTINGS_UPDATED,
    START_MESSAGE,
)
from .response_formatter import response_formatter

logger = logging.getLogger(__name__)

TOPUP_PAYLOAD = "balance_topup"


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command.

    Registers the user on first contact, greets them and shows the main menu.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    if not update.effective_user or not update.message:
        return

    tg_user = update.effective_user
    user = await container.account_service().ensure_user(tg_user.id, tg_user.username)

    await update.message.reply_text(START_MESSAGE.format(first_name=tg_user.first_name))
    await _send_main_menu(update.message, user.balance_cents, config.bot.is_admin(tg_user.id))


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages.

    Replies to the coupon prompts are routed to redemption or generation;
    every other message is treated as a list of part numbers.
    """
    if not update.effective_user or not update.message:
        return

    message = update.message
    tg_user = update.effective_user
    reply_to = message.reply_to_message
    prompt = reply_to.text if reply_to and reply_to.from_user and reply_to.from_user.is_bot else None

    if prompt == ENTER_COUPON_CODE:
        await _redeem_coupon(tg_user, message)
    elif prompt == ENTER_COUPON_VALUE:
        await _generate_coupon(tg_user, message)
    else:
        await _process_search(tg_user, message)


async def _process_search(tg_user: TelegramUser, message: Message) -> None:
    is_admin = config.bot.is_admin(tg_user.id)

    try:
        user = await container.account_service().ensure_user(tg_user.id, tg_user.username)

        text = message.text or ""
        part_count = len(parse_part_numbers(text))
        if part_count:
            await message.reply_text(PROCESSING)
            await message.reply_text(SEARCHING.format(count=part_count))

        outcome = await container.search_processor().process_request(user, is_admin, text)
        reply = response_formatter.format_search_outcome(outcome)

        match outcome:
            case SearchSucceeded():
                await message.reply_text(SEARCH_COMPLETE)
                await message.reply_document(document=outcome.report, filename=outcome.filename)
                await message.reply_text(reply)
                await _send_main_menu(message, outcome.balance_cents, is_admin)
            case NoItemsFound() | SearchFailed():
                await message.reply_text(reply)
                await _send_main_menu(message, outcome.balance_cents, is_admin)
            case InsufficientFunds():
                await message.reply_text(reply, reply_markup=keyboards.insufficient_funds())
            case _:
                await message.reply_text(reply)

    except Exception as e:
        logger.exception(f"Error processing search request from user {tg_user.id}: {e}")
        await message.reply_text(GENERIC_ERROR)


async def _redeem_coupon(tg_user: TelegramUser, message: Message) -> None:
    try:
        added, balance = await container.coupon_service().redeem(
            tg_user.id, tg_user.username, message.text or ""
        )
    except (CouponNotFoundError, CouponAlreadyActivatedError) as e:
        logger.info(f"Coupon rejected for user {tg_user.id}: {e}")
        await message.reply_text(COUPON_NOT_FOUND)
    except Exception as e:
        logger.exception(f"Error redeeming coupon for user {tg_user.id}: {e}")
        await message.reply_text(GENERIC_ERROR)
        return
    else:
        await message.reply_text(
            COUPON_REDEEMED.format(amount=format_cents(added), balance=format_cents(balance))
        )

    try:
        user = await container.account_service().ensure_user(tg_user.id, tg_user.username)
    except Exception as e:
        logger.exception(f"Error loading user {tg_user.id} for main menu: {e}")
        return
    await _send_main_menu(message, user.balance_cents, config.bot.is_admin(tg_user.id))


async def _generate_coupon(tg_user: TelegramUser, message: Message) -> None:
    if not config.bot.is_admin(tg_user.id):
        await message.reply_text(ADMIN_ONLY)
        return

    try:
        coupon = await container.coupon_service().generate((message.text or "").strip())
    except InvalidCouponValueError:
        await message.reply_text(COUPON_INVALID_AMOUNT)
        return
    except Exception as e:
        logger.exception(f"Error creating coupon: {e}")
        await message.reply_text(COUPON_CREATE_ERROR)
        return

    await message.reply_text(
        COUPON_CREATED.format(code=coupon.code, amount=format_cents(coupon.value_cents)),
        parse_mode="Markdown",
    )


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle inline keyboard button presses."""
    query = update.callback_query
    if query is None or not update.effective_user:
        return

    await query.answer()

    tg_user = update.effective_user
    is_admin = config.bot.is_admin(tg_user.id)
    data = query.data or ""
    chat_id = query.message.chat.id if query.message else tg_user.id

    try:
        accounts = container.account_service()

        if data == keyboards.CHECK_BALANCE:
            user = await accounts.ensure_user(tg_user.id, tg_user.username)
            await context.bot.send_message(
                chat_id, CURRENT_BALANCE.format(balance=format_cents(user.balance_cents))
            )

        elif data == keyboards.TOP_UP:
            await _send_invoice(context, chat_id)

        elif data == keyboards.REDEEM_PROMPT:
            await context.bot.send_message(
                chat_id, ENTER_COUPON_CODE, reply_markup=keyboards.force_reply()
            )

        elif data == keyboards.GENERATE_COUPON_PROMPT:
            if not is_admin:
                await context.bot.send_message(chat_id, ADMIN_ONLY)
                return
            await context.bot.send_message(
                chat_id, ENTER_COUPON_VALUE, reply_markup=keyboards.force_reply()
            )

        elif data == keyboards.SEARCH_SETTINGS:
            user = await accounts.ensure_user(tg_user.id, tg_user.username)
            await _edit_query_message(
                query,
                SEARCH_SETTINGS_PROMPT,
                keyboards.search_settings(user.search_mode),
            )

        elif data.startswith(keyboards.SET_SEARCH_CONFIG_PREFIX):
            mode = SearchMode.parse(data.removeprefix(keyboards.SET_SEARCH_CONFIG_PREFIX))
            await accounts.ensure_user(tg_user.id, tg_user.username)
            user = await accounts.update_search_mode(tg_user.id, mode)
            await _edit_query_message(
                query,
                f"{SETTINGS_UPDATED}\n\n{SEARCH_SETTINGS_PROMPT}",
                keyboards.search_settings(user.search_mode),
            )

        elif data == keyboards.BACK_TO_MAIN_MENU:
            user = await accounts.ensure_user(tg_user.id, tg_user.username)
            await _edit_query_message(
                query,
                MAIN_MENU.format(balance=format_cents(user.balance_cents)),
                keyboards.main_menu(is_admin),
            )

        else:
            logger.warning(f"Unknown callback data: {data}")

    except InvalidSearchModeError as e:
        logger.warning(f"Rejected search mode from user {tg_user.id}: {e}")
        await context.bot.send_message(chat_id, CALLBACK_ERROR)
    except Exception as e:
        logger.exception(f"Error handling callback {data}: {e}")
        await context.bot.send_message(chat_id, CALLBACK_ERROR)


async def precheckout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Approve every pre-checkout query for the top-up invoice."""
    query = update.pre_checkout_query
    if query is None:
        return

    if query.invoice_payload != TOPUP_PAYLOAD:
        logger.warning(f"Unexpected invoice payload: {query.invoice_payload}")
    await query.answer(ok=True)


async def successful_payment(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Credit the paid amount to the payer's balance."""
    message = update.message
    if message is None or message.successful_payment is None or not update.effective_user:
        return

    tg_user = update.effective_user
    payment = message.successful_payment

    try:
        balance = await container.account_service().credit(
            tg_user.id, tg_user.username, payment.total_amount
        )
    except Exception as e:
        logger.exception(f"Error crediting payment for user {tg_user.id}: {e}")
        await message.reply_text(GENERIC_ERROR)
        return

    await message.reply_text(
        PAYMENT_SUCCESS.format(
            amount=format_cents(payment.total_amount), balance=format_cents(balance)
        )
    )


async def _send_invoice(context: ContextTypes.DEFAULT_TYPE, chat_id: int) -> None:
    payments = config.payments
    if not payments.enabled:
        await context.bot.send_message(chat_id, PAYMENTS_DISABLED)
        return

    cost = format_cents(payments.amount_cents)
    await context.bot.send_invoice(
        chat_id=chat_id,
        title=INVOICE_TITLE,
        description=INVOICE_DESCRIPTION.format(cost=cost),
        payload=TOPUP_PAYLOAD,
        provider_token=payments.provider_token,
        currency=payments.currency,
        prices=[LabeledPrice(INVOICE_TITLE, payments.amount_cents)],
    )


async def _edit_query_message(query, text: str, reply_markup) -> None:
    try:
        await query.edit_message_text(text, reply_markup=reply_markup)
    except BadRequest as e:
        if "message is not modified" not in str(e).lower():
            raise
        logger.debug("Callback message already up to date")


async def _send_main_menu(message: Message, balance_cents: int, is_admin: bool) -> None:
    await message.reply_text(
        MAIN_MENU.format(balance=format_cents(balance_cents)),
        reply_markup=keyboards.main_menu(is_admin),
    )
