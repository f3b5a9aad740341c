"""AI translation gateway.

Accepts text-translation requests over HTTP and forwards them to a
configured chat-completion provider.
"""

__version__ = "0.1.0"
