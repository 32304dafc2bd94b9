#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Rejection classification.
#
import pytest, copy

from ckbpop.exceptions import (classify, ChainRejection, RpcError, NetworkUnavailable,
                                SignerUnavailable, PopError, FormatError, Malformed, QrRejected)
from ckbpop.constants import VALIDATOR_ERRORS, GENERIC_REJECTION
from ckbpop.flows import broadcast
from ckbpop.txn import TxBuilder

EVENT = '4cdd574178607061a4b041aefcba19f1755de1efda16dac3a7e53fbb470d07ba'

NODE_MSG = ('TransactionFailedToVerify: Verification failed Script(TransactionScriptError '
            '{ source: Outputs[0].Type, cause: ValidationFailure: see error code %d on page '
            'https://nervosnetwork.github.io/ckb-script-error-codes/by-type-script-hash/'
            '00.html#%d })')

@pytest.mark.parametrize('code', [1, 2, 3, 4])
def test_known_codes(code):
    r = classify(NODE_MSG % (code, code))
    assert r.code == code
    assert r.message == VALIDATOR_ERRORS[code]
    assert r.already_exists == (code == 3)

def test_other_forms():
    r = classify('Script ValidationFailure(3) at output 0')
    assert (r.code, r.message) == (3, VALIDATOR_ERRORS[3])

    r = classify(NODE_MSG % (42, 42))
    assert (r.code, r.message) == (42, GENERIC_REJECTION)

    r = classify(NODE_MSG % (-7, -7))
    assert (r.code, r.message) == (-7, GENERIC_REJECTION)

    r = classify('ValidationFailure without any number')
    assert (r.code, r.message) == (None, GENERIC_REJECTION)

def test_not_chain():
    r = classify(RuntimeError('User rejected the request'))
    assert r.code is None
    assert r.message == 'User rejected the request'
    assert not r.already_exists

    r = classify('timeout')
    assert (r.code, r.message) == (None, 'timeout')

def test_rpc_error():
    # code is in the raw node text, not the summary
    raw = NODE_MSG % (3, 3)
    r = classify(RpcError('-302 on send_transaction: failed', -302, raw))
    assert r.code == 3
    assert raw in r.raw

def test_no_stale_code():
    a = classify(NODE_MSG % (3, 3))
    b = classify(NODE_MSG % (1, 1))
    assert (a.code, b.code) == (3, 1)
    assert classify(a) is a

def test_hierarchy():
    assert issubclass(Malformed, QrRejected)
    assert issubclass(Malformed, FormatError)
    assert issubclass(FormatError, ValueError)
    for c in [ChainRejection, NetworkUnavailable, SignerUnavailable, RpcError]:
        assert issubclass(c, PopError)
    assert str(SignerUnavailable()) == 'Wallet not connected'

def test_chain_rules(chain, organizer, contracts):
    # each type script rule, as the node reports it
    tx = TxBuilder(organizer, contracts).build_badge_mint_tx(EVENT, organizer.address,
                                                                organizer.address)
    short = copy.deepcopy(tx)
    short['outputs'][0]['type']['args'] = short['outputs'][0]['type']['args'][0:66]
    with pytest.raises(ChainRejection) as ee:
        broadcast(organizer, short)
    assert ee.value.code == 1

    double = copy.deepcopy(tx)
    double['outputs'].append(double['outputs'][0])
    double['outputs_data'].append(double['outputs_data'][0])
    with pytest.raises(ChainRejection) as ee:
        broadcast(organizer, double)
    assert ee.value.code == 2

    assert broadcast(organizer, tx).startswith('0x')
    with pytest.raises(ChainRejection) as ee:
        broadcast(organizer, tx)
    assert ee.value.code == 3
    assert ee.value.already_exists
    assert ee.value.message == 'Badge/Anchor already exists on-chain'

def test_broadcast_passthru(chain, organizer):
    chain.offline = True
    with pytest.raises(NetworkUnavailable):
        broadcast(organizer, dict(outputs=[]))

    organizer.disconnect()
    with pytest.raises(SignerUnavailable):
        broadcast(organizer, dict(outputs=[]))

    class Grumpy:
        def send_transaction(self, tx):
            raise RuntimeError('User rejected the request')

    with pytest.raises(ChainRejection) as ee:
        broadcast(Grumpy(), {})
    assert ee.value.code is None
    assert 'User rejected' in ee.value.message

def test_broadcast_any_exception():
    # wallet bridges do not all raise RuntimeError
    class Bridge:
        def __init__(self, exc):
            self.exc = exc
        def send_transaction(self, tx):
            raise self.exc

    for exc in [ValueError(NODE_MSG % (3, 3)), OSError(NODE_MSG % (2, 2)), Exception('boom')]:
        with pytest.raises(ChainRejection) as ee:
            broadcast(Bridge(exc), {})
        assert ee.value.__cause__ is exc

    with pytest.raises(ChainRejection) as ee:
        broadcast(Bridge(ValueError(NODE_MSG % (3, 3))), {})
    assert ee.value.code == 3
    assert ee.value.already_exists

# EOF
