"""Known EVM networks the deployer is run against."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a target EVM network."""

    chain_id: int
    name: str
    rpc_url: str
    free_gas: bool = False


# ── Chain Registry ───────────────────────────────────────────────────────────

CHAINS: dict[str, ChainConfig] = {
    "besu-dev": ChainConfig(
        chain_id=2018,
        name="Hyperledger Besu (dev network)",
        rpc_url="http://localhost:8545",
        free_gas=True,
    ),
    "ganache": ChainConfig(
        chain_id=1337,
        name="Ganache",
        rpc_url="http://localhost:7545",
    ),
    "anvil": ChainConfig(
        chain_id=31337,
        name="Foundry Anvil",
        rpc_url="http://localhost:8545",
    ),
    "hardhat": ChainConfig(
        chain_id=31337,
        name="Hardhat Network",
        rpc_url="http://localhost:8545",
    ),
    "sepolia": ChainConfig(
        chain_id=11155111,
        name="Sepolia",
        rpc_url="https://rpc.sepolia.org",
    ),
}


def get_chain_config(chain_name: str) -> ChainConfig | None:
    """Get chain configuration by name."""
    return CHAINS.get(chain_name.lower())


def resolve_rpc_url(chain_name: str, rpc_url: str = "") -> str:
    """Return the explicit RPC URL, falling back to the chain's default."""
    if rpc_url:
        return rpc_url
    chain = get_chain_config(chain_name)
    if chain is None:
        raise ValueError(f"Unsupported chain: {chain_name}")
    return chain.rpc_url
