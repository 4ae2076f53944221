"""Minimal ABI helpers: signature hashing and 32-byte word codecs."""

from web3 import Web3

WORD_HEX = 64


def event_topic(signature: str) -> str:
    """topic0 for an event signature, e.g. "Transfer(address,address,uint256)"."""
    return "0x" + bytes(Web3.keccak(text=signature)).hex()


def function_selector(signature: str) -> str:
    return "0x" + bytes(Web3.keccak(text=signature)[:4]).hex()


def encode_address(address: str) -> str:
    """Left-pad an address to one 32-byte word (no 0x prefix)."""
    return address.lower().removeprefix("0x").rjust(WORD_HEX, "0")


def split_words(data: str) -> list[str]:
    body = data.removeprefix("0x")
    if len(body) % WORD_HEX:
        raise ValueError(f"data length {len(body)} is not a multiple of 32 bytes")
    return [body[i:i + WORD_HEX] for i in range(0, len(body), WORD_HEX)]


def word_to_address(word: str) -> str:
    return "0x" + word.removeprefix("0x")[-40:].lower()


def word_to_int(word: str, signed: bool = False) -> int:
    return int.from_bytes(bytes.fromhex(word.removeprefix("0x")), "big", signed=signed)


def to_checksum(address: str) -> str:
    return Web3.to_checksum_address(address)
