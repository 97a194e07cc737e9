"""ERC-20 contract and allowance helpers."""

from __future__ import annotations

from web3 import Web3
from web3.contract import Contract

from bridger.contracts import load_contract_abi


def get_contract(web3: Web3, token_address: str) -> Contract:
    """Return an ERC-20 contract instance for ``token_address``."""
    return web3.eth.contract(address=Web3.to_checksum_address(token_address), abi=load_contract_abi("erc20.json"))


def allowance_of(web3: Web3, token_address: str, owner: str, spender: str) -> int:
    """Fetch the ERC-20 allowance."""
    contract = get_contract(web3, token_address)
    return contract.functions.allowance(
        Web3.to_checksum_address(owner),
        Web3.to_checksum_address(spender),
    ).call()


__all__ = ["allowance_of", "get_contract"]
