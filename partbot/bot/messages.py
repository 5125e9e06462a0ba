"""Telegram bot message templates and constants.

Contains all user-facing message templates. Amounts are passed in already
formatted as dollars (see models.format_cents).
"""

# Greeting and menu
START_MESSAGE = "👋 Hello, {first_name}!\n\nPlease send me one or more part numbers to search."
MAIN_MENU = "Your current balance: ${balance}.\n\nPlease select an action:"
SEARCH_SETTINGS_PROMPT = "Select default search type:"

# Search progress
PROCESSING = "⚙️ Processing your request..."
SEARCHING = "Searching for information on {count} part number(s)..."
SEARCH_COMPLETE = "✅ Search complete. Creating Excel report..."

# Balance
CURRENT_BALANCE = "Your current balance: ${balance}"
INSUFFICIENT_FUNDS = "🚫 Insufficient funds in your balance to complete the request."
INSUFFICIENT_FUNDS_DETAILS = "Required: ${required}, available: ${available}."
REQUEST_COMPLETE = (
    "✅ Request completed! ${cost} has been deducted from your balance. "
    "Remaining balance: ${balance}."
)
REQUEST_COMPLETE_FREE = "✅ Request completed!"
FOUND_SUMMARY = "Found {found} of {total} part number(s)."

# Errors
NO_PART_NUMBERS = "Please enter at least one part number."
GENERIC_ERROR = "An unexpected error occurred. Please try again."
NO_ITEMS_FOUND = "❌ Nothing found for your request."
NO_ITEMS_FOUND_REFUND = (
    "❌ Nothing found for your request. Funds have been returned to your balance. "
    "Current balance: ${balance}"
)
REFUND_ON_ERROR = (
    "⚠️ An error occurred while processing your request. Funds have been returned to "
    "your balance. Current balance: ${balance}"
)

# Coupons
ENTER_COUPON_CODE = "Please enter your coupon code:"
COUPON_NOT_FOUND = "❌ Coupon not found or already used."
COUPON_REDEEMED = (
    "✅ Coupon successfully activated!\nYour balance has been topped up by ${amount}.\n"
    "New balance: ${balance}."
)
ENTER_COUPON_VALUE = "Enter the coupon amount in dollars (e.g., 10 or 5.50):"
COUPON_CREATED = "✅ New coupon created:\n\nCode: `{code}`\nAmount: ${amount}"
COUPON_INVALID_AMOUNT = "Invalid amount. Please enter a positive number."
COUPON_CREATE_ERROR = "❌ Error creating coupon."
ADMIN_ONLY = "⛔️ This command is available only to the administrator."

# Settings
SETTINGS_UPDATED = "Settings updated!"
CALLBACK_ERROR = "An error occurred"

# Payments
PAYMENTS_DISABLED = (
    "Unfortunately, the payment function is temporarily disabled. Please try again later."
)
INVOICE_TITLE = "Balance Top-up"
INVOICE_DESCRIPTION = "Purchase of bot credits for ${cost}"
PAYMENT_SUCCESS = (
    "✅ Payment successful!\n\nYour balance has been topped up by ${amount}.\n"
    "Current balance: ${balance}."
)

# Keyboard labels
BUTTON_CHECK_BALANCE = "💰 Check balance"
BUTTON_TOP_UP = "💳 Top up balance"
BUTTON_REDEEM = "🎁 Use coupon"
BUTTON_SETTINGS = "⚙️ Search settings"
BUTTON_GENERATE_COUPON = "🎟️ Generate coupon (Admin)"
BUTTON_BACK = "🔙 Back to main menu"
SEARCH_MODE_LABELS = {
    "ACTIVE": "Active listings",
    "SOLD": "Sold listings",
    "ENDED": "Ended listings",
}
