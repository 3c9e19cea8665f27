from pathlib import Path

import pytest


@pytest.fixture
def test_root_dir():
    return Path(__file__).parent


@pytest.fixture
def hex_dir(test_root_dir):
    return test_root_dir / '..' / 'extra' / 'hex'
