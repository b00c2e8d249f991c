import os
from dotenv import load_dotenv
load_dotenv()

# ---- General ----
DEFAULT_NETWORK = os.environ.get("FUNDFLOW_NETWORK", "ethereum")
LOG_LEVEL = os.environ.get("FUNDFLOW_LOG_LEVEL", "WARNING").upper()

# Networks served by Etherscan v2 (label -> chain id)
NETWORK_CHAIN_IDS = {
    "ethereum": 1,
    "optimism": 10,
    "bsc": 56,
    "polygon": 137,
    "base": 8453,
    "arbitrum": 42161,
}

# Networks whose addresses / hashes follow the 0x-hex format
EVM_NETWORKS = set(NETWORK_CHAIN_IDS)

# ---- Address tracing ----
DEFAULT_MAX_DEPTH = 5
MAX_TRACE_DEPTH = 50            # hard cap, recursion depth follows max_depth
MAX_TX_PER_ADDRESS = 10

# ---- Path finding ----
PATH_MAX_DEPTH = 5
MAX_PATHS = 10
MAX_TX_FOR_PATHS = 5

# ---- Flow summaries ----
FLOW_LOOKBACK_DEPTH = 2

# ---- Etherscan ----
ETHERSCAN_API_KEY = os.environ.get("ETHERSCAN_API_KEY")
ETHERSCAN_BASE_URL = "https://api.etherscan.io/v2/api"

ETHERSCAN_REQUESTS_PER_SEC = 2.0
ETHERSCAN_TIMEOUT_SEC = 15
ETHERSCAN_MAX_RETRIES = 5
