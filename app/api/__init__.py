"""
HTTP transport.

aiohttp application exposing the investment operations.
"""
