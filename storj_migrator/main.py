#!/usr/bin/env python3
"""
storj-migrator
Back up every object of a Zenko (S3 compatible) instance to a Storj bucket.

Commands:
 - parse [zenkoConfig] [debug]                    list source buckets and objects
 - test  [storjConfig] [key] [restrict] [debug]   upload a sample payload
 - store [zenkoConfig] [storjConfig] [key] [restrict] [debug]
                                                  chunked transfer, verified in debug mode
"""

import argparse
import logging
import sys

from .config import load_storj_config, load_zenko_config, settings
from .errors import MigrationError, StoreConnectionError
from .logs import init_logger
from .migrator import Migrator, list_source, upload_sample
from .scope import AccessScopeManager
from .source import ChunkReader, SourceLister, make_source_client
from .uploader import Uploader
from .verifier import Verifier

logger = logging.getLogger(__name__)


# ------------------ arguments ------------------
def split_args(tokens, names):
    """Assign positional ``tokens`` to ``names`` in order; ``debug`` may appear anywhere."""
    debug = False
    values = dict.fromkeys(names)
    rest = iter(names)
    for token in tokens:
        if token == 'debug':
            debug = True
            continue
        name = next(rest, names[-1])
        values[name] = token
    return values, debug


def make_network():
    from .uplink import UplinkNetwork

    try:
        return UplinkNetwork()
    except RuntimeError as e:
        raise StoreConnectionError('load_network', cause=e) from e


# ------------------ commands ------------------
def cmd_parse(tokens):
    values, debug = split_args(tokens, ['zenko'])
    init_logger(settings.LOG_FILE, debug)
    cfg = load_zenko_config(values['zenko'] or settings.ZENKO_CONFIG_FILE)
    lister = SourceLister(make_source_client(cfg), debug=debug)
    lister.list_buckets()
    logger.info("Successfully connected to Zenko!")
    list_source(lister)
    return 0


def cmd_test(tokens, network_factory=None):
    values, debug = split_args(tokens, ['storj', 'key', 'restrict'])
    init_logger(settings.LOG_FILE, debug)
    cfg = load_storj_config(values['storj'] or settings.STORJ_CONFIG_FILE)
    manager = AccessScopeManager((network_factory or make_network)(), cfg, debug=debug)
    with manager.acquire(derive_fresh=values['key'] == 'key', restrict=values['restrict'] == 'restrict') as session:
        upload_sample(Uploader(session.bucket, cfg.upload_path, debug=debug), debug=debug)
    logger.info('Upload "testdata" on Storj: Successful!')
    return 0


def cmd_store(tokens, network_factory=None):
    values, debug = split_args(tokens, ['zenko', 'storj', 'key', 'restrict'])
    init_logger(settings.LOG_FILE, debug)
    zenko_cfg = load_zenko_config(values['zenko'] or settings.ZENKO_CONFIG_FILE)
    client = make_source_client(zenko_cfg)
    lister = SourceLister(client, debug=debug)
    lister.list_buckets()
    logger.info("Successfully connected to Zenko!")

    storj_cfg = load_storj_config(values['storj'] or settings.STORJ_CONFIG_FILE)
    derive_fresh = values['key'] == 'key'
    restrict = values['restrict'] == 'restrict'
    manager = AccessScopeManager((network_factory or make_network)(), storj_cfg, debug=debug)
    with manager.acquire(derive_fresh=derive_fresh, restrict=restrict) as session:
        uploader = Uploader(session.bucket, storj_cfg.upload_path, debug=debug)
        reader = ChunkReader(client, window_size=settings.CHUNK_SIZE, debug=debug)
        result = Migrator(lister, reader, uploader, debug=debug).run()
        if debug:
            Verifier(session.bucket, storj_cfg.upload_path, output_dir=settings.DEBUG_DIR, debug=debug).verify(result.records)
        exported = session.exported_scope

    if derive_fresh and exported:
        label = 'Restricted Serialized Scope Key' if session.restricted is not None else 'Serialized Scope Key'
        print(f"{label}: {exported}")
    return 0


COMMANDS = {
    'parse': cmd_parse,
    'test': cmd_test,
    'store': cmd_store,
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog='storj-migrator',
        description='Backup your files from Zenko Orbit to the decentralized Storj network',
    )
    sub = parser.add_subparsers(dest='command', required=True)
    for name, alias, help_text in (
        ('parse', 'p', 'read the Zenko configuration and list all files with their paths'),
        ('test', 't', 'read the Storj configuration and upload sample data'),
        ('store', 's', 'transfer every file from Zenko to the configured Storj bucket'),
    ):
        p = sub.add_parser(name, aliases=[alias], help=help_text)
        p.set_defaults(command=name)
        p.add_argument('args', nargs='*')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return COMMANDS[args.command](args.args)
    except MigrationError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
