"""
Client-side instruction builders for the programs the swap test drives.

- spl-token-swap ``Initialize``: creates the constant-product pool the
  aggregator routes through.
- aggregator (1sol) ``Initialize`` and ``Swap``.

Integers are little-endian, as the on-chain programs unpack them.
"""

import struct
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

# spl-token-swap SwapV1 account size, including the version byte
TOKEN_SWAP_ACCOUNT_LEN = 324
# version u8, nonce u8, token program, token account, token mint
ONESOL_PROTOCOL_ACCOUNT_LEN = 1 + 1 + 32 + 32 + 32

CURVE_CONSTANT_PRODUCT = 0
DEX_SPL_TOKEN_SWAP = 0
# Accounts the aggregator consumes per spl-token-swap dex
SPL_TOKEN_SWAP_ACCOUNT_SIZE = 7

_TOKEN_SWAP_INITIALIZE = 0
_ONESOL_INITIALIZE = 0
_ONESOL_SWAP = 1

# --- Data Structures ---

class TokenSwapFees(BaseModel):
    trade_fee_numerator: int = 25
    trade_fee_denominator: int = 10000
    owner_trade_fee_numerator: int = 5
    owner_trade_fee_denominator: int = 10000
    owner_withdraw_fee_numerator: int = 1
    owner_withdraw_fee_denominator: int = 6
    host_fee_numerator: int = 20
    host_fee_denominator: int = 100

    def pack(self) -> bytes:
        return struct.pack(
            "<8Q",
            self.trade_fee_numerator,
            self.trade_fee_denominator,
            self.owner_trade_fee_numerator,
            self.owner_trade_fee_denominator,
            self.owner_withdraw_fee_numerator,
            self.owner_withdraw_fee_denominator,
            self.host_fee_numerator,
            self.host_fee_denominator,
        )


class DexConfig(BaseModel):
    dex_type: int = Field(DEX_SPL_TOKEN_SWAP, ge=0, le=255) # 0: spl-token-swap
    account_size: int = Field(SPL_TOKEN_SWAP_ACCOUNT_SIZE, ge=0, le=255) # Accounts this dex consumes
    ratio: int = Field(1, ge=0, le=255) # Multiplier applied to amount_in / minimum_amount_out

    def pack(self) -> bytes:
        return bytes([self.dex_type, self.account_size, self.ratio])


class TokenSwapAccounts(BaseModel):
    """The accounts of one spl-token-swap pool, in the order the aggregator reads them."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    swap: Pubkey
    authority: Pubkey
    token_a: Pubkey
    token_b: Pubkey
    pool_mint: Pubkey
    fee_account: Pubkey
    program_id: Pubkey

    def metas(self) -> List[AccountMeta]:
        return [
            AccountMeta(self.swap, is_signer=False, is_writable=False),
            AccountMeta(self.authority, is_signer=False, is_writable=False),
            AccountMeta(self.token_a, is_signer=False, is_writable=True),
            AccountMeta(self.token_b, is_signer=False, is_writable=True),
            AccountMeta(self.pool_mint, is_signer=False, is_writable=True),
            AccountMeta(self.fee_account, is_signer=False, is_writable=True),
            AccountMeta(self.program_id, is_signer=False, is_writable=False),
        ]

# --- spl-token-swap ---

def token_swap_initialize(
    program_id: Pubkey,
    swap: Pubkey,
    authority: Pubkey,
    token_a: Pubkey,
    token_b: Pubkey,
    pool_mint: Pubkey,
    fee_account: Pubkey,
    pool_destination: Pubkey,
    token_program_id: Pubkey,
    nonce: int,
    fees: TokenSwapFees,
    curve_type: int = CURVE_CONSTANT_PRODUCT,
) -> Instruction:
    data = (
        bytes([_TOKEN_SWAP_INITIALIZE, nonce])
        + fees.pack()
        + bytes([curve_type])
        + bytes(32) # Curve parameters, unused by the constant product curve
    )
    accounts = [
        AccountMeta(swap, is_signer=False, is_writable=True),
        AccountMeta(authority, is_signer=False, is_writable=False),
        AccountMeta(token_a, is_signer=False, is_writable=False),
        AccountMeta(token_b, is_signer=False, is_writable=False),
        AccountMeta(pool_mint, is_signer=False, is_writable=True),
        AccountMeta(fee_account, is_signer=False, is_writable=False),
        AccountMeta(pool_destination, is_signer=False, is_writable=True),
        AccountMeta(token_program_id, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)

# --- Aggregator ---

def onesol_initialize(
    program_id: Pubkey,
    protocol: Pubkey,
    authority: Pubkey,
    token_account: Pubkey,
    token_program_id: Pubkey,
    nonce: int,
) -> Instruction:
    accounts = [
        AccountMeta(protocol, is_signer=True, is_writable=True),
        AccountMeta(authority, is_signer=False, is_writable=False),
        AccountMeta(token_account, is_signer=False, is_writable=False),
        AccountMeta(token_program_id, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, bytes([_ONESOL_INITIALIZE, nonce]), accounts)


def onesol_swap(
    program_id: Pubkey,
    protocol: Pubkey,
    protocol_authority: Pubkey,
    user_transfer_authority: Pubkey,
    protocol_token_account: Pubkey,
    source: Pubkey,
    destination: Pubkey,
    token_program_id: Pubkey,
    amount_in: int,
    minimum_amount_out: int,
    dexes: Sequence[TokenSwapAccounts],
    dex_configs: Sequence[DexConfig],
) -> Instruction:
    """Routes ``amount_in`` of ``source`` through ``dexes`` into ``destination``."""
    if amount_in < 1:
        raise ValueError("amount_in must be at least 1")
    if not dex_configs:
        raise ValueError("at least one dex config is required")
    if len(dex_configs) != len(dexes):
        raise ValueError(f"{len(dex_configs)} dex configs given for {len(dexes)} dexes")

    data = struct.pack("<BQQB", _ONESOL_SWAP, amount_in, minimum_amount_out, len(dex_configs))
    data += b"".join(config.pack() for config in dex_configs)

    accounts = [
        AccountMeta(protocol, is_signer=False, is_writable=False),
        AccountMeta(protocol_authority, is_signer=False, is_writable=False),
        AccountMeta(user_transfer_authority, is_signer=True, is_writable=False),
        AccountMeta(protocol_token_account, is_signer=False, is_writable=True),
        AccountMeta(source, is_signer=False, is_writable=True),
        AccountMeta(destination, is_signer=False, is_writable=True),
        AccountMeta(token_program_id, is_signer=False, is_writable=False),
    ]
    for dex in dexes:
        accounts.extend(dex.metas())
    return Instruction(program_id, data, accounts)
