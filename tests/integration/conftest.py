from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Generator, List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pytest import MonkeyPatch
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

import onesol_suite.swap_test as swap_test_module
from onesol_suite.config import _ENV_FIELDS
from onesol_suite.runner import Step

# --- Environment Fixture ---

@pytest.fixture(autouse=True)
def clean_env(monkeypatch: MonkeyPatch, tmp_path: Path) -> Path:
    """
    Removes every suite variable from the environment and points ONESOL_ENV_FILE
    at a file that does not exist, so a developer's .env never leaks into a test.
    Variables a test loads through dotenv are undone at teardown as well.
    """
    for var in list(_ENV_FIELDS) + ["ONESOL_ENV_FILE"]:
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    env_file = tmp_path / "missing.env"
    monkeypatch.setenv("ONESOL_ENV_FILE", str(env_file))
    return env_file

# --- Step Helpers ---

class StepRecorder:
    """Builds steps that log their start and end into one shared list."""

    def __init__(self):
        self.events: List[str] = []

    def step(self, name: str, error: Exception = None) -> Step:
        async def operation() -> None:
            self.events.append(f"start:{name}")
            if error is not None:
                raise error
            self.events.append(f"end:{name}")
        return Step(name=name, operation=operation)

    @property
    def started(self) -> List[str]:
        return [e.split(":", 1)[1] for e in self.events if e.startswith("start:")]


@pytest.fixture
def recorder() -> StepRecorder:
    return StepRecorder()

# --- Mocked Chain Fixture ---

def _make_token(pubkey: Pubkey, balance: int) -> MagicMock:
    token = MagicMock()
    token.pubkey = pubkey
    token.create_account = AsyncMock(side_effect=lambda owner, *args, **kwargs: Pubkey.new_unique())
    token.mint_to = AsyncMock()
    token.approve = AsyncMock()
    balance_resp = MagicMock()
    balance_resp.value.amount = str(balance)
    token.get_balance = AsyncMock(return_value=balance_resp)
    return token


@pytest.fixture
def mock_chain(monkeypatch: MonkeyPatch) -> Generator[SimpleNamespace, None, None]:
    """
    Patches everything the swap test steps reach the cluster through.
    Yields the mocks; ``chain.tokens`` maps mint pubkeys to their token mocks
    and ``chain.balance`` sets what the user's destination account reports.
    """
    onesol_program_id = Pubkey.new_unique()
    monkeypatch.setenv("ONESOL_PROGRAM_ID", str(onesol_program_id))

    chain = SimpleNamespace(
        client=AsyncMock(),
        payer=Keypair(),
        onesol_program_id=onesol_program_id,
        tokens={},
        balance=95_000,
    )
    tokens: Dict[Pubkey, MagicMock] = chain.tokens

    async def create_mint(*args, **kwargs):
        token = _make_token(Pubkey.new_unique(), chain.balance)
        tokens[token.pubkey] = token
        return token

    def open_token(conn, pubkey, program_id, payer):
        token = tokens[pubkey]
        token.get_balance.return_value.value.amount = str(chain.balance)
        return token

    mock_token_class = MagicMock(side_effect=open_token)
    mock_token_class.create_mint = AsyncMock(side_effect=create_mint)

    @asynccontextmanager
    async def fake_connect(config):
        yield chain.client

    swap_test_module.reset_state()
    with patch('onesol_suite.swap_test.connect', side_effect=fake_connect) as mock_connect, \
         patch('onesol_suite.swap_test.wait_for_health', new_callable=AsyncMock) as mock_health, \
         patch('onesol_suite.swap_test.ensure_funded', new_callable=AsyncMock) as mock_funded, \
         patch('onesol_suite.swap_test.require_program', new_callable=AsyncMock) as mock_program, \
         patch('onesol_suite.swap_test.require_owner', new_callable=AsyncMock) as mock_owner, \
         patch('onesol_suite.swap_test.create_account_instruction', new_callable=AsyncMock) as mock_create_ix, \
         patch('onesol_suite.swap_test.send_and_confirm', new_callable=AsyncMock, return_value=Signature.default()) as mock_send, \
         patch('onesol_suite.swap_test.load_payer', return_value=chain.payer), \
         patch('onesol_suite.swap_test.AsyncToken', mock_token_class):
        mock_create_ix.side_effect = lambda *args, **kwargs: MagicMock(name="create_account_ix")
        chain.connect = mock_connect
        chain.wait_for_health = mock_health
        chain.ensure_funded = mock_funded
        chain.require_program = mock_program
        chain.require_owner = mock_owner
        chain.create_account_instruction = mock_create_ix
        chain.send_and_confirm = mock_send
        chain.token_class = mock_token_class
        yield chain
    swap_test_module.reset_state()
