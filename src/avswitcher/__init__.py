"""avswitcher -- HTTP control service for legacy AV hardware.

Translates HTTP requests into line-oriented ASCII commands for a matrix
video switcher and a VIA collaboration endpoint. The telnet command
channel owns device connections (transient or pooled with idle
eviction), frames commands and parses delimiter-terminated replies.
"""

__version__ = "0.1.0"
