#!/usr/bin/env python
#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# To use this, install with:
#
#   pip install --editable '.[cli]'
#
# That will create the command "ckbpop" in your path.
#
#
import click, sys, time, json
from functools import wraps

from ckbpop.constants import *
from ckbpop.exceptions import PopError, ChainRejection, classify
from ckbpop.config import load_contracts, rpc_url, is_placeholder
from ckbpop import __version__

# dict of options that apply to all commands
global global_opts
global_opts = dict()

# Cleanup display (supress traceback) for user-feedback exceptions
_sys_excepthook = sys.excepthook
def my_hook(ty, val, tb):
    if issubclass(ty, (PopError, RuntimeError)):
        print("FATAL: %s" % val, file=sys.stderr)
    else:
        return _sys_excepthook(ty, val, tb)
sys.excepthook=my_hook

def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)

def get_contracts():
    global global_opts
    rv = load_contracts(global_opts.get('contracts'))
    if is_placeholder(rv):
        click.echo("WARNING: using placeholder contract deployments.", err=True)
    return rv

def get_client():
    # JSON-RPC client for the node picked by options/env
    from ckbpop.rpc import CkbRpcClient
    global global_opts

    if global_opts.get('verbose'):
        import ckbpop.rpc as rr
        rr.VERBOSE = True

    url = global_opts.get('rpc') or rpc_url(testnet=not global_opts.get('mainnet'))
    return CkbRpcClient(url)

def get_query():
    from ckbpop.query import ChainQuery
    return ChainQuery(get_client(), get_contracts(), testnet=not global_opts.get('mainnet'))

def get_signer(key):
    # software key from option or $CKBPOP_KEY
    import os
    from ckbpop.signer import KeySigner

    key = key or os.environ.get('CKBPOP_KEY')
    if not key:
        fail("Need a private key (--key or $CKBPOP_KEY)")

    s = KeySigner(key, testnet=not global_opts.get('mainnet'))
    s.connect()
    return s

def display_errors(f):
    # clean-up display of errors from chain
    @wraps(f)
    def wrapper(*args, **kws):
        try:
            return f(*args, **kws)
        except ChainRejection as exc:
            code = '' if exc.code is None else f' (code {exc.code})'
            click.echo(f"\nREJECTED{code}: {exc.message}\n", err=True)
            sys.exit(2)
        except PopError as exc:
            fail(str(exc))
    return wrapper

def dump_json(d):
    click.echo(json.dumps(d, indent=2))

# Accept any prefix of a command name.
#
# from <https://click.palletsprojects.com/en/8.0.x/advanced/?#command-aliases>
class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Abiguous command. Pick one of: {' | '.join(sorted(matches))}")

    def resolve_command(self, ctx, args):
        # always return the full command name
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args


#
# Options we want for all commands
#
@click.group(cls=AliasedGroup)
@click.option('--rpc', '-r', default=None, metavar="URL",
                    help="CKB node JSON-RPC endpoint (default: $CKB_RPC_URL or public testnet)")
@click.option('--contracts', '-c', default=None, metavar="FILE.json",
                    help="Validator deployment config (default: $CKBPOP_CONTRACTS)")
@click.option('--mainnet', is_flag=True, help="Mainnet addresses and node.")
@click.option('--verbose', '-v', is_flag=True, help="Show traffic with node.")
@click.option('--pdb', is_flag=True,
                    help="Prepare patient for surgery to remove bugs.")
@click.version_option(version=__version__)
def main(**kws):
    '''
    Proof-of-presence on CKB: event ids, anchor/badge proposals, kiosk QR codes.

    You can use "ev", or "e" for "event-id": any distinct prefix for all commands.
    '''
    # implement PDB option here
    if kws.pop('pdb', False):
        import pdb, sys
        def doit(ex_cls, ex, tb):
            pdb.pm()
        sys.excepthook = doit

    global global_opts
    global_opts.update(kws)


@main.command('event-id')
@click.argument('creator')
@click.option('--timestamp', '-t', type=int, default=None, help="Unix seconds (default: now)")
@click.option('--nonce', '-n', default=None, help="Nonce text (default: random)")
@display_errors
def event_id(creator, timestamp, nonce):
    "Derive a new event id for a creator address"
    from ckbpop.ident import derive_event_id

    pre = derive_event_id(creator, timestamp=timestamp, nonce=nonce)
    click.echo(pre.event_id)
    click.echo(f'timestamp: {pre.timestamp}', err=True)
    click.echo(f'nonce: {pre.nonce}', err=True)

@main.command('args')
@click.argument('event_id')
@click.argument('party')
@display_errors
def show_args(event_id, party):
    "Show type script args for (event, party address)"
    from ckbpop.scriptargs import build_args
    click.echo(build_args(event_id, party))

@main.command('address')
@click.argument('pubkey')
@display_errors
def show_address(pubkey):
    "Default-lock address for a compressed public key (hex)"
    from ckbpop.utils import from_hex
    from ckbpop.address import render_address
    click.echo(render_address(from_hex(pubkey, 33), testnet=not global_opts.get('mainnet')))

@main.command('anchor-tx')
@click.argument('event_id')
@click.argument('creator')
@click.option('--name', required=True, help="Event name")
@click.option('--location', default=None)
@click.option('--start-time', default=None, help="Free text or ISO date")
@click.option('--description', default=None)
@click.option('--image-url', default=None)
@display_errors
def anchor_tx(event_id, creator, **md):
    "Print an (unsigned) anchor proposal for a wallet to complete"
    from ckbpop.txn import TxBuilder
    from ckbpop.signer import WatchOnlySigner

    dump_json(TxBuilder(WatchOnlySigner(creator), get_contracts()).build_anchor_tx(event_id, creator, md))

@main.command('badge-tx')
@click.argument('event_id')
@click.argument('issuer')
@click.argument('recipient')
@click.option('--proof-hash', '-p', default=None, metavar="HEX", help="Attendance proof hash")
@display_errors
def badge_tx(event_id, issuer, recipient, proof_hash):
    "Print an (unsigned) badge mint proposal for a wallet to complete"
    from ckbpop.txn import TxBuilder
    from ckbpop.signer import WatchOnlySigner

    dump_json(TxBuilder(WatchOnlySigner(issuer), get_contracts()).build_badge_mint_tx(
                                        event_id, issuer, recipient, proof_hash))

@main.command('find')
@click.argument('event_id')
@display_errors
def find_event(event_id):
    "Look up an event's anchor on chain"
    ev = get_query().find_event_by_id(event_id)
    if not ev:
        fail("No anchor found (indexer may lag a new event).")

    for k, v in ev._asdict().items():
        if v is not None:
            click.echo('%s: %s' % (k, v))

@main.command('badges')
@click.option('--event', '-e', 'event_id', default=None, help="All holders of an event")
@click.option('--address', '-a', default=None, help="All badges of an address")
@display_errors
def list_badges(event_id, address):
    "List badges by event or by holder"
    if bool(event_id) == bool(address):
        fail("Give exactly one of --event or --address")

    q = get_query()
    if event_id:
        rows = q.find_badges_by_event(event_id)
    else:
        rows = q.find_badges_by_address(address)

    for r in rows:
        click.echo('  '.join(r))
    click.echo(f'{len(rows)} badge(s)', err=True)

@main.command('exists')
@click.argument('event_id')
@click.argument('party')
@click.option('--anchor', is_flag=True, help="Look for an anchor, not a badge")
@display_errors
def exists(event_id, party, anchor):
    "Advisory: have we seen a cell with these exact args?"
    seen = get_query().exists_hint(event_id, party, kind='anchor' if anchor else 'badge')
    click.echo('seen' if seen else 'not seen (unknown: only the chain can say for sure)')

@main.command('kiosk')
@click.argument('event_id')
@click.option('--key', '-k', default=None, metavar="HEX", help="Organizer private key")
@click.option('--interval', '-i', type=int, default=QR_ROTATE_SECS, help="Seconds per QR")
@click.option('--outfile', '-o', metavar="filename.png",
                        help="Save one frame as SVG or PNG (depends on extension)", default=None,
                        type=click.File('wb'))
@click.option('--error-mode', '-e', default='L', metavar="L|M|H",
            help="Forward error correction level (L = low, H=High=bigger)")
@display_errors
def kiosk(event_id, key, interval, outfile, error_mode):
    "Show a rotating, signed check-in QR (Ctrl-C to stop)"
    import pyqrcode
    from ckbpop.kiosk import Kiosk

    k = Kiosk(get_signer(key), event_id)
    k.start()

    def show(text):
        q = pyqrcode.create(text, error=error_mode)
        click.clear()
        print(q.terminal(quiet_zone=2))
        print(text[0:40] + '...')
        print()

    if outfile:
        q = pyqrcode.create(k.payload(), error=error_mode)
        if outfile.name.lower().endswith('.svg'):
            q.svg(outfile, scale=4)
        else:
            q.png(outfile, scale=4)
        click.echo(f"Wrote {outfile.tell():,} bytes to: {outfile.name}", err=1)
        k.close()
        return

    k.rotate(show, interval)
    try:
        while k.state == 'active':
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        k.close()

    if k.error:
        fail(f"QR display stopped: {k.error}")

@main.command('check')
@click.argument('payload')
@click.option('--strict', is_flag=True, help="Only accept signed payloads")
@click.option('--offline', is_flag=True, help="Don't look up the event creator")
@display_errors
def check(payload, strict, offline):
    "Validate a scanned QR payload"
    from ckbpop.kiosk import validate_payload, DEFAULT_POLICY, STRICT_POLICY

    lookup = None
    if not offline:
        q = get_query()
        def lookup(eid):
            ev = q.find_event_by_id(eid)
            return ev.creator_address if ev else None

    r = validate_payload(payload, creator_lookup=lookup,
                            policy=STRICT_POLICY if strict else DEFAULT_POLICY)
    if not r.ok:
        fail(f"{r.reason} (event {r.event_id})")

    click.echo(f'OK: {r.event_id} [{r.assurance}]')

@main.command('wait')
@click.argument('tx_hash')
@click.option('--interval', type=int, default=CONFIRM_INTERVAL)
@click.option('--attempts', type=int, default=CONFIRM_MAX_ATTEMPTS)
@display_errors
def wait(tx_hash, interval, attempts):
    "Wait for a transaction to be committed; show its block"
    from ckbpop.confirm import ConfirmationTracker

    t = ConfirmationTracker(get_client(), tx_hash, interval=interval, max_attempts=attempts)
    try:
        height = t.run()
    except KeyboardInterrupt:
        t.cancel()
        height = None

    if height is None:
        fail(f"Not committed after {t.attempts} tries (last status: {t.status})")

    click.echo(height)

@main.command('classify')
@click.argument('message')
def classify_cmd(message):
    "Explain a raw rejection message from a node or wallet"
    r = classify(message)
    click.echo(f'code: {r.code}')
    click.echo(f'message: {r.message}')

# EOF
