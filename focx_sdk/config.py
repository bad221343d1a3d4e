"""Network configuration for the FOCX SDK."""

import os
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, TypeVar

from solders.pubkey import Pubkey

from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT_SECS,
    DEFAULT_KEYWORD_SHARD_COUNT,
    DEFAULT_PAYMENT_MINT,
    DEFAULT_POLL_INTERVAL_SECS,
    DEFAULT_RECENCY_TIMEOUT_SECS,
    PACKET_DATA_SIZE,
    SHOP_PROGRAM_ID,
    VAULT_PROGRAM_ID,
)
from .errors import ConfigError

T = TypeVar("T")

RPC_URLS: Dict[str, str] = {
    "mainnet": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "localnet": "http://127.0.0.1:8899",
}

COMMITMENTS = ("confirmed", "finalized")

ENV_PREFIX = "FOCX_"


@dataclass
class NetworkConfig:
    """Configuration for RPC access, timeouts and program addresses."""

    network: str = "devnet"
    rpc_url: Optional[str] = None
    commitment: str = "finalized"
    recency_timeout_secs: float = DEFAULT_RECENCY_TIMEOUT_SECS
    confirmation_timeout_secs: float = DEFAULT_CONFIRMATION_TIMEOUT_SECS
    poll_interval_secs: float = DEFAULT_POLL_INTERVAL_SECS
    max_transaction_size: int = PACKET_DATA_SIZE
    keyword_shard_count: int = DEFAULT_KEYWORD_SHARD_COUNT
    shop_program_id: Pubkey = field(default=SHOP_PROGRAM_ID)
    vault_program_id: Pubkey = field(default=VAULT_PROGRAM_ID)
    payment_mint: Pubkey = field(default=DEFAULT_PAYMENT_MINT)

    def __post_init__(self):
        if self.network not in RPC_URLS:
            raise ConfigError(
                f"unknown network {self.network!r} (expected one of {', '.join(RPC_URLS)})"
            )
        if self.rpc_url is None:
            self.rpc_url = RPC_URLS[self.network]
        if self.commitment not in COMMITMENTS:
            raise ConfigError(f"commitment must be one of {COMMITMENTS}, got {self.commitment!r}")
        for name in ("recency_timeout_secs", "confirmation_timeout_secs", "poll_interval_secs"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.max_transaction_size <= 0 or self.max_transaction_size > PACKET_DATA_SIZE:
            raise ConfigError(
                f"max_transaction_size must be in 1..{PACKET_DATA_SIZE}, "
                f"got {self.max_transaction_size}"
            )
        if self.keyword_shard_count < 1:
            raise ConfigError("keyword_shard_count must be at least 1")

    @classmethod
    def default(cls) -> "NetworkConfig":
        """Create default config (devnet, finalized commitment)."""
        return cls()

    @classmethod
    def for_network(cls, network: str) -> "NetworkConfig":
        """Create config for a named cluster."""
        return cls(network=network)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NetworkConfig":
        """Build config from ``FOCX_*`` environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        def read(name: str, convert: Callable[[str], T]) -> None:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                return
            try:
                kwargs[name] = convert(raw)
            except ValueError as e:
                raise ConfigError(f"{ENV_PREFIX}{name.upper()}={raw!r}: {e}") from e

        read("network", str)
        read("rpc_url", str)
        read("commitment", str)
        read("recency_timeout_secs", float)
        read("confirmation_timeout_secs", float)
        read("poll_interval_secs", float)
        read("max_transaction_size", int)
        read("keyword_shard_count", int)
        read("shop_program_id", Pubkey.from_string)
        read("vault_program_id", Pubkey.from_string)
        read("payment_mint", Pubkey.from_string)
        return cls(**kwargs)

    def with_rpc_url(self, url: str) -> "NetworkConfig":
        """Set a custom RPC endpoint."""
        self.rpc_url = url
        return self

    def with_commitment(self, commitment: str) -> "NetworkConfig":
        """Set the commitment level a transaction must reach."""
        if commitment not in COMMITMENTS:
            raise ConfigError(f"commitment must be one of {COMMITMENTS}, got {commitment!r}")
        self.commitment = commitment
        return self
