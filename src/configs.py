import os

# Logs
LOG_AWS = os.getenv('LOG_AWS') == 'True'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE')
LOG_STREAM_NAME = os.getenv('LOG_STREAM_NAME', 'bpool-client')
LOGGING_CONFIG_FILE = os.getenv('LOGGING_CONFIG_FILE', 'logging_config.yaml')

# Web3
RPC_URI = os.getenv('RPC_URI', 'http://127.0.0.1:8545')
CHAIN_ID = int(os.environ['CHAIN_ID']) if os.getenv('CHAIN_ID') else None
POA_CHAIN = os.getenv('POA_CHAIN') == 'True'

# Wallet, transactions are signed by the node's default account if no key is set
PRIVATE_KEY = os.getenv('PRIVATE_KEY')

# Connection params
CACHE_TTL = float(os.getenv('CACHE_TTL', '5'))
POLL_INTERVAL = float(os.getenv('POLL_INTERVAL', '1'))

# Debug / optimization, CACHE_STATS logs cache hits and misses after each command
CACHE_STATS = os.getenv('CACHE_STATS') == 'True'
CACHE_LOG_LEVEL = os.getenv('CACHE_LOG_LEVEL', 'INFO')

# Gas
BASELINE_GAS_PRICE_PREMIUM = float(os.getenv('BASELINE_GAS_PRICE_PREMIUM', '1.0'))
MIN_GAS_PRICE = int(os.getenv('MIN_GAS_PRICE', '1000000000'))
MAX_GAS = int(os.getenv('MAX_GAS', '1000000'))

# Receipts
WAIT_RECEIPT = os.getenv('WAIT_RECEIPT', 'True') == 'True'
MAX_BLOCKS_WAIT_RECEIPT = int(os.getenv('MAX_BLOCKS_WAIT_RECEIPT', '20'))

# Event logs
LOG_FROM_BLOCK = int(os.getenv('LOG_FROM_BLOCK', '0'))
LOG_BLOCK_CHUNK_SIZE = int(os.getenv('LOG_BLOCK_CHUNK_SIZE', '0'))

# Block used for contract reads
BLOCK = os.getenv('BLOCK', 'latest')
