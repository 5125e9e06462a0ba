"""Telegram bot implementation package.

Contains all Telegram specific functionality: update handlers, inline
keyboards, message templates and the formatter that turns search outcomes
into replies.
"""
