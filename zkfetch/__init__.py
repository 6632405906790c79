"""
zkfetch: request attested web data and verify it on chain.
"""

__version__ = "0.3.0"
