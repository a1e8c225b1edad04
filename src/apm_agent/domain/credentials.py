"""API key issuance and the public address derived from it.

The address is a pure function of the key: "0x" + hex of the last 20 bytes of
SHA-256(api_key). Keys are random UUID4 strings, so two registrations never
share a key or an address even when the agent names are identical.
"""

import hashlib
import uuid

_ADDRESS_BYTES = 20


def generate_api_key() -> str:
    return str(uuid.uuid4())


def derive_public_address(api_key: str) -> str:
    digest = hashlib.sha256(api_key.encode("utf-8")).digest()
    return "0x" + digest[-_ADDRESS_BYTES:].hex()
