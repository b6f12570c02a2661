"""HTTP surface for avswitcher.

A FastAPI application exposing the video switcher and VIA operations.
The command channels are created in the application lifespan and closed
at shutdown.
"""
