import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Sequence

import httpx
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.rpc.responses import GetBalanceResp
from solders.signature import Signature
from solders.system_program import CreateAccountParams, create_account
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from mcp.server.fastmcp.utilities.logging import get_logger

from onesol_suite.config import SuiteConfig
from onesol_suite.errors import ClusterError, PreconditionError, TransactionFailed

POLL_INTERVAL = 0.5 # seconds between status polls
_DONE_STATUSES = (TransactionConfirmationStatus.Confirmed, TransactionConfirmationStatus.Finalized)

logger = get_logger(__name__)

# --- Health & Connection ---

async def wait_for_health(endpoint: str, timeout: float) -> None:
    """Polls ``<endpoint>/health`` until the validator answers ``ok``."""
    url = endpoint.rstrip("/") + "/health"
    deadline = time.monotonic() + timeout
    last_error = "no response"
    async with httpx.AsyncClient(timeout=5.0) as http:
        while True:
            try:
                response = await http.get(url)
                if response.status_code == 200 and response.text.strip() == "ok":
                    logger.debug(f"{url} reports healthy")
                    return
                last_error = f"HTTP {response.status_code}: {response.text.strip()}"
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__
            if time.monotonic() >= deadline:
                raise ClusterError(f"Cluster at {endpoint} not healthy after {timeout}s ({last_error})")
            await asyncio.sleep(POLL_INTERVAL)


@asynccontextmanager
async def connect(config: SuiteConfig) -> AsyncIterator[AsyncClient]:
    """Yields a connected AsyncClient on the configured endpoint and closes it afterwards."""
    async with AsyncClient(config.rpc_endpoint, commitment=Confirmed) as client:
        logger.debug(f"Connecting to RPC: {config.rpc_endpoint}")
        if not await client.is_connected():
            logger.error(f"Failed to connect to RPC endpoint: {config.rpc_endpoint}")
            raise ClusterError(f"Could not connect to Solana RPC at {config.rpc_endpoint}")
        yield client

# --- Transactions ---

async def confirm(client: AsyncClient, signature: Signature, timeout: float) -> None:
    """Waits until ``signature`` is confirmed. Raises TransactionFailed if it landed with an error."""
    deadline = time.monotonic() + timeout
    while True:
        resp = await client.get_signature_statuses([signature])
        status = resp.value[0]
        if status is not None:
            if status.err is not None:
                raise TransactionFailed(str(signature), status.err)
            if status.confirmation_status in _DONE_STATUSES:
                logger.debug(f"Transaction {signature} confirmed")
                return
        if time.monotonic() >= deadline:
            raise ClusterError(f"Transaction {signature} not confirmed after {timeout}s")
        await asyncio.sleep(POLL_INTERVAL)


async def send_and_confirm(
    client: AsyncClient,
    instructions: List[Instruction],
    signers: Sequence[Keypair],
    timeout: float,
) -> Signature:
    """Signs ``instructions`` with ``signers`` (the first one pays), submits and confirms them."""
    blockhash = (await client.get_latest_blockhash()).value.blockhash
    message = Message.new_with_blockhash(instructions, signers[0].pubkey(), blockhash)
    tx = Transaction(list(signers), message, blockhash)
    resp = await client.send_raw_transaction(
        bytes(tx), opts=TxOpts(skip_confirmation=True, preflight_commitment=Confirmed)
    )
    signature = resp.value
    logger.debug(f"Submitted transaction {signature} with {len(instructions)} instruction(s)")
    await confirm(client, signature, timeout)
    return signature


async def ensure_funded(client: AsyncClient, payer: Pubkey, minimum: int, airdrop: int, timeout: float) -> int:
    """Airdrops ``airdrop`` lamports to ``payer`` if it holds less than ``minimum``. Returns the balance."""
    balance_resp: GetBalanceResp = await client.get_balance(payer)
    balance = balance_resp.value
    if balance >= minimum:
        logger.debug(f"Payer {payer} holds {balance} lamports, no airdrop needed")
        return balance
    logger.info(f"Payer {payer} holds {balance} lamports, requesting airdrop of {airdrop}")
    airdrop_resp = await client.request_airdrop(payer, airdrop)
    await confirm(client, airdrop_resp.value, timeout)
    return balance + airdrop

# --- Accounts ---

async def create_account_instruction(client: AsyncClient, payer: Pubkey, new_account: Pubkey, space: int, owner: Pubkey) -> Instruction:
    """Builds a system create_account instruction funded for rent exemption."""
    rent = (await client.get_minimum_balance_for_rent_exemption(space)).value
    return create_account(
        CreateAccountParams(from_pubkey=payer, to_pubkey=new_account, lamports=rent, space=space, owner=owner)
    )


async def require_program(client: AsyncClient, program_id: Pubkey, label: str) -> None:
    """Raises PreconditionError unless ``program_id`` is deployed and executable."""
    info = (await client.get_account_info(program_id)).value
    if info is None:
        raise PreconditionError(f"{label} program {program_id} is not deployed on this cluster")
    if not info.executable:
        raise PreconditionError(f"{label} account {program_id} is not an executable program")


async def require_owner(client: AsyncClient, account: Pubkey, owner: Pubkey, label: str) -> None:
    """Raises PreconditionError unless ``account`` exists and is owned by ``owner``."""
    info = (await client.get_account_info(account)).value
    if info is None:
        raise PreconditionError(f"{label} account {account} does not exist")
    if info.owner != owner:
        raise PreconditionError(f"{label} account {account} is owned by {info.owner}, expected {owner}")
