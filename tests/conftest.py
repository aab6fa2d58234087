import logging

import pytest

from bfast.reporting import SilentReporter, set_reporter, set_verbosity


@pytest.fixture(autouse=True)
def _reset_reporting():
    # The CLI installs a global reporter and logging handler; keep tests isolated
    yield
    set_reporter(SilentReporter())
    set_verbosity(0)
    logger = logging.getLogger("bfast")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
