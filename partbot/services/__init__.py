"""Business logic services package.

Contains the paid search flow (charging, searching, refunding and report
building), the eBay search gateway and its cache, user accounts and coupon
handling.
"""
