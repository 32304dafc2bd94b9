import pytest

from ckbpop.config import load_contracts
from ckbpop.signer import KeySigner
from ckbpop.query import ChainQuery
from ckbpop.repository import Repository
from devchain import MemoryChain

def pytest_addoption(parser):
    parser.addoption("--rpc", action="store", type=str,
                     default=None, help="CKB node RPC URL for live tests")

@pytest.fixture(scope='session')
def live_rpc(request):
    # some tests require "--rpc URL" arg on pytest cmd line
    rv = request.config.getoption("--rpc")
    if rv is None:
        raise pytest.skip("need --rpc for this test")
    return rv

@pytest.fixture
def contracts():
    return load_contracts()

@pytest.fixture
def chain(contracts):
    return MemoryChain(contracts)

@pytest.fixture
def organizer(chain):
    s = KeySigner(bytes([1])*32, client=chain)
    s.connect()
    return s

@pytest.fixture
def attendee(chain):
    s = KeySigner(bytes([2])*32, client=chain)
    s.connect()
    return s

@pytest.fixture
def query(chain, contracts):
    return ChainQuery(chain, contracts, page_size=2)

@pytest.fixture
def repo():
    return Repository()

# EOF
