import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure le logger racine une seule fois au démarrage.

    - handler console (stderr)
    - SQLAlchemy limité aux WARNING sauf si SQL_ECHO est activé
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Evite les doublons si uvicorn / pytest a déjà mis des handlers
    for h in list(root.handlers):
        if getattr(h, "_tasklist_handler", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler._tasklist_handler = True
    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
