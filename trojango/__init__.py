"""Trojan-style proxy core: configuration, start-up options, relaying, redirection, geodata decoding and logging."""

__version__ = "0.1.0"