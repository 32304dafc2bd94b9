#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#

__version__ = '0.9.0'

__all__ = [ 'utils', 'ident', 'scriptargs', 'celldata', 'txn', 'query', 'kiosk', 'confirm',
            'attendance', 'flows', 'records', 'repository', 'backend',
            'exceptions', 'constants', 'config', 'address', 'signer', 'rpc' ]

# build proposals for the chain
from ckbpop.txn import TxBuilder

# read the chain
from ckbpop.query import ChainQuery
