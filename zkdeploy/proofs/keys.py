"""secp256k1 key pairs for note owners."""

from __future__ import annotations

from dataclasses import dataclass

from eth_account import Account
from eth_keys import keys


@dataclass(frozen=True)
class KeyPair:
    """An account able to own notes and sign spend authorizations."""

    address: str
    public_key: str
    private_key: str

    @classmethod
    def from_private_key(cls, private_key: str | bytes) -> KeyPair:
        account = Account.from_key(private_key)
        key = keys.PrivateKey(account.key)
        return cls(
            address=account.address,
            # SEC1 uncompressed: 0x04 || X || Y
            public_key="0x04" + key.public_key.to_bytes().hex(),
            private_key=key.to_hex(),
        )

    @classmethod
    def generate(cls) -> KeyPair:
        """Create a fresh random key pair."""
        return cls.from_private_key(Account.create().key)

    def __repr__(self) -> str:
        return f"KeyPair(address={self.address!r})"
