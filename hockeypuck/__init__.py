"""OpenPGP key server building blocks: configuration, logging, HKP and OpenPGP helpers."""

__version__ = "1.0.0"