"""Telegram bot that looks up part numbers on eBay and reports prices as xlsx."""
