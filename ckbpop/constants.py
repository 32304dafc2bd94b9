#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# System constants.
#

# protocol identifier, also used as message tag
PROTOCOL_ID = 'ckb-pop'
PROTOCOL_TAG = 'CKB-PoP'

# length of all digests (SHA256) and of type script args (two digests)
HASH_LEN = 32
ARGS_LEN = 64

# error codes returned by the on-chain type scripts (anchor and badge share them)
ERR_INVALID_ARGS = 1
ERR_DUPLICATE_OUTPUT = 2
ERR_ALREADY_EXISTS = 3
ERR_INVALID_METADATA = 4

VALIDATOR_ERRORS = {
    ERR_INVALID_ARGS: 'Invalid script args format',
    ERR_DUPLICATE_OUTPUT: 'Duplicate output detected',
    ERR_ALREADY_EXISTS: 'Badge/Anchor already exists on-chain',
    ERR_INVALID_METADATA: 'Invalid metadata format',
}
GENERIC_REJECTION = 'Transaction rejected by type script'

# event id nonce size (bytes, shown as hex)
EVENT_NONCE_SIZE = 16

# QR payloads: how old (or how far in future) a timestamp may be, in milliseconds
QR_MAX_AGE_MS = 60_000
QR_MAX_FUTURE_MS = 10_000

# timestamps at or above this are milliseconds, not seconds
MS_THRESHOLD = 10 ** 12

# kiosk display refreshes the QR this often (seconds)
QR_ROTATE_SECS = 15

# a signed kiosk session is good for this long (seconds)
KIOSK_SESSION_MAX = 12 * 3600

# confirmation polling
CONFIRM_INTERVAL = 5
CONFIRM_MAX_ATTEMPTS = 24

# read-path retries against RPC/backend
NET_RETRIES = 3
NET_BACKOFF = 0.5
NET_TIMEOUT = 20

# badge cell data: [version:1][flags:1][content_hash:32]
BADGE_DATA_VERSION = 1
BADGE_DATA_LEN = 2 + HASH_LEN
BADGE_FLAG_PROOF = 0x01         # content hash is an attendance proof hash

# 1 CKB = 10^8 shannons
SHANNONS = 10 ** 8

# minimum capacity we will ever place in an output (shannons), on top of occupied size
MIN_CELL_CAPACITY = 0

# CKB signed messages have this prefix before hashing
CKB_MESSAGE_PREFIX = 'Nervos Message:'
CKB_HASH_PERSONAL = b'ckb-default-hash'

# secp256k1-blake160-sighash-all lock (mainnet & testnet, hash_type=type)
SECP256K1_BLAKE160_CODE_HASH = \
    '0x9bd7e06f3ecf4be0f2fcd2188b23f1b9fcc88e5d4b65a8637b17723bbda3cce8'

# address HRPs
MAINNET_HRP = 'ckb'
TESTNET_HRP = 'ckt'

# script hash_type as a single byte in addresses
HASH_TYPES = { 'data': 0x00, 'type': 0x01, 'data1': 0x02, 'data2': 0x04 }

DEP_TYPES = { 'code', 'dep_group' }

# public nodes (indexer RPC is served on the same endpoint)
TESTNET_RPC_URL = 'https://testnet.ckb.dev/rpc'
MAINNET_RPC_URL = 'https://mainnet.ckb.dev/rpc'

# placeholder deployments; replace via CKBPOP_CONTRACTS once validators are deployed
ZERO_HASH = '0x' + '00' * 32

DEFAULT_CONTRACTS = {
    'badge': {
        'code_hash': '0x' + '00' * 31 + '01',
        'hash_type': 'type',
        'cell_dep': { 'out_point': { 'tx_hash': ZERO_HASH, 'index': 0 }, 'dep_type': 'code' },
    },
    'anchor': {
        'code_hash': '0x' + '00' * 31 + '02',
        'hash_type': 'type',
        'cell_dep': { 'out_point': { 'tx_hash': ZERO_HASH, 'index': 0 }, 'dep_type': 'code' },
    },
}

# EOF
