import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from mcp.server.fastmcp.utilities.logging import get_logger

from onesol_suite.errors import ConfigError

ROOT_DIR = Path(__file__).parent.parent
DEFAULT_ENV_FILE = ROOT_DIR / ".env"

DEFAULT_RPC_ENDPOINT = "http://localhost:8899"
DEFAULT_TOKEN_SWAP_PROGRAM_ID = "SwaPpA9LAaLfeLi3a68M4DjnLqgtticKg6CnyNwgAC8"
DEFAULT_PAYER_KEYPAIR = "~/.config/solana/id.json"
LAMPORTS_PER_SOL = 1_000_000_000

logger = get_logger(__name__)

# --- Data Structures ---

class SuiteConfig(BaseModel):
    rpc_endpoint: str = DEFAULT_RPC_ENDPOINT
    onesol_program_id: Optional[str] = None # Only needed once the aggregator steps run
    token_swap_program_id: str = DEFAULT_TOKEN_SWAP_PROGRAM_ID
    payer_keypair: str = DEFAULT_PAYER_KEYPAIR
    airdrop_lamports: int = Field(10 * LAMPORTS_PER_SOL, gt=0)
    min_payer_lamports: int = Field(LAMPORTS_PER_SOL, ge=0)
    confirm_timeout: float = Field(60.0, gt=0)
    health_timeout: float = Field(30.0, gt=0)
    log_level: str = "INFO"

    @field_validator("onesol_program_id", "token_swap_program_id")
    @classmethod
    def _check_pubkey(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        Pubkey.from_string(value) # Raises ValueError on a malformed key
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value}")
        return value

    def onesol_program(self) -> Pubkey:
        if not self.onesol_program_id:
            raise ConfigError("ONESOL_PROGRAM_ID is not set; deploy the program and add its id to .env")
        return Pubkey.from_string(self.onesol_program_id)

    def token_swap_program(self) -> Pubkey:
        return Pubkey.from_string(self.token_swap_program_id)

# --- Loading ---

_ENV_FIELDS = {
    "RPC_ENDPOINT": "rpc_endpoint",
    "ONESOL_PROGRAM_ID": "onesol_program_id",
    "TOKEN_SWAP_PROGRAM_ID": "token_swap_program_id",
    "PAYER_KEYPAIR": "payer_keypair",
    "AIRDROP_LAMPORTS": "airdrop_lamports",
    "MIN_PAYER_LAMPORTS": "min_payer_lamports",
    "CONFIRM_TIMEOUT": "confirm_timeout",
    "HEALTH_TIMEOUT": "health_timeout",
    "LOG_LEVEL": "log_level",
}

def load_config(env_file: Optional[Path] = None) -> SuiteConfig:
    """
    Loads the suite configuration from the environment.

    Variables from ``env_file`` (default: ``ONESOL_ENV_FILE`` or ``.env`` at the
    repository root) are loaded first; variables already set in the process
    environment win. Raises ConfigError if a value does not validate.
    """
    if env_file is None:
        env_file = Path(os.getenv("ONESOL_ENV_FILE", str(DEFAULT_ENV_FILE)))
    if env_file.exists():
        load_dotenv(dotenv_path=env_file)
        logger.debug(f"Loaded environment from {env_file}")
    else:
        logger.debug(f"Env file {env_file} not found, using process environment only.")

    values = {field: os.environ[var] for var, field in _ENV_FIELDS.items() if os.environ.get(var)}
    try:
        return SuiteConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid suite configuration: {e}") from e


def load_payer(path: str) -> Keypair:
    """Loads a keypair file (JSON byte array, as written by solana-keygen). Generates one if missing."""
    keypair_path = Path(path).expanduser()
    if not keypair_path.exists():
        logger.warning(f"Payer keypair {keypair_path} not found, using a fresh keypair.")
        return Keypair()
    try:
        with open(keypair_path, 'r') as f:
            secret = json.load(f)
        return Keypair.from_bytes(bytes(secret))
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        raise ConfigError(f"Could not read payer keypair from {keypair_path}: {e}") from e
