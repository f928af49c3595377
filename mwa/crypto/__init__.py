"""
Cryptographic primitives for MWA.

This module provides:
- Keccak-256 hashing (Ethereum-style)
- secp256k1 key generation and address derivation
- Deterministic auction identifiers

Participants are plain hashable identifiers to the engine; addresses
derived here are a convenient, collision-resistant choice of identifier.
Authenticating them is outside the engine.
"""

import secrets
from dataclasses import dataclass
from typing import Any

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Domain separator for auction ids
DOMAIN_AUCTION_ID = b"mwa.auction.v1"


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation, auction ids.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Key Generation
# =============================================================================


@dataclass
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key (integer in [1, order-1])
        public_key: 64-byte uncompressed public key (x || y coordinates)
    """
    private_key: bytes
    public_key: bytes

    @property
    def address(self) -> str:
        """
        Derive address from public key (Ethereum-style).

        Address = last 20 bytes of keccak256(public_key), hex-encoded with 0x prefix.
        """
        return bytes_to_hex(address_from_public_key(self.public_key))


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def generate_keypair() -> KeyPair:
    """
    Generate a new random keypair.

    Uses cryptographically secure random number generator.
    """
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def address_from_public_key(public_key: bytes) -> bytes:
    """
    Derive address from public key.

    address = keccak256(public_key)[-20:]
    """
    if len(public_key) != 64:
        raise ValueError("Public key must be 64 bytes")
    return keccak256(public_key)[-20:]


# =============================================================================
# Auction Identifiers
# =============================================================================


def _participant_bytes(participant: Any) -> bytes:
    if isinstance(participant, (bytes, bytearray)):
        return bytes(participant)
    return str(participant).encode("utf-8")


def derive_auction_id(
    owner: Any,
    opened_at: int,
    duration: int,
    num_winners: int,
    bid_increment: int,
    nonce: int = 0,
) -> bytes:
    """
    Compute a deterministic 32-byte auction id.

    id = keccak256(domain || keccak256(owner) || opened_at || duration
                   || num_winners || bid_increment || nonce)

    All integers are encoded as 32-byte big-endian words.
    """
    return keccak256(
        DOMAIN_AUCTION_ID
        + keccak256(_participant_bytes(owner))
        + opened_at.to_bytes(32, "big")
        + duration.to_bytes(32, "big")
        + num_winners.to_bytes(32, "big")
        + bid_increment.to_bytes(32, "big")
        + nonce.to_bytes(32, "big")
    )


# =============================================================================
# Encoding
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


def is_valid_address(address: str) -> bool:
    """Check if string is a valid address format."""
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        bytes.fromhex(address[2:])
    except ValueError:
        return False
    return True


__all__ = [
    "SECP256K1_ORDER",
    "keccak256",
    "KeyPair",
    "generate_keypair",
    "private_key_to_public_key",
    "address_from_public_key",
    "derive_auction_id",
    "bytes_to_hex",
    "hex_to_bytes",
    "is_valid_address",
]
