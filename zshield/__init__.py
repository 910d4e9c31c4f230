"""Shielded-transaction primitives: wire-format codecs, hashing, PRFs, Merkle trees, note encryption and Equihash helpers."""

__version__ = "0.1.0"