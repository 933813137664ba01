"""Client primitives for the TON blockchain: addresses, TL encoding, lite-server access and a vanity address search."""

__version__ = "0.1.0"