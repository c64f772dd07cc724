import sys
import argparse
import logging
import traceback

from keepsync import __version__
from keepsync.console import Console
from keepsync.registry import create_providers
from keepsync.store import JsonStore, default_store_path
from keepsync.syncer import Syncer

logging.basicConfig(format='%(asctime)s,%(msecs)d %(levelname)-8s %(message)s',
        datefmt='%Y-%m-%d:%H:%M:%S',)
log = logging.getLogger()


def main():
    """keepsync command line main"""

    parser = argparse.ArgumentParser(prog="keepsync",
            description='keepsync - upload a KeePass database to your cloud storage')
    parser.add_argument('path', help='Absolute path of the .kdbx database')

    args = parser.parse_args()

    log.setLevel(logging.INFO)
    log.debug("args %s", args.__dict__)

    console = Console()
    console.welcome("keepsync", __version__)

    store = JsonStore(default_store_path())
    syncer = Syncer(store, create_providers(store, console, args.path), console, args.path)

    try:
        syncer.start()
    except (KeyboardInterrupt, EOFError):
        log.error("Interrupted")
        sys.exit(1)
    except Exception as e:
        log.error("Error %s", e)
        log.debug("%s", traceback.format_exc())
        sys.exit(1)
