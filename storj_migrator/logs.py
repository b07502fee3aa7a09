import logging
import sys

FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def init_logger(log_file=None, debug=False):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=FORMAT,
        handlers=handlers,
        force=True,
    )


def masked(secret, visible=4):
    """Return ``secret`` with all but its last ``visible`` characters hidden."""
    if not secret:
        return ''
    if len(secret) <= visible:
        return '*' * len(secret)
    return '*' * (len(secret) - visible) + secret[-visible:]
