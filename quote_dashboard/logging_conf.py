import logging


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    # request URLs carry the API token as a query parameter
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)
