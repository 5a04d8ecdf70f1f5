import pytest

from sizeguide import main
from sizeguide.cache import cache_clear


@pytest.fixture(autouse=True)
def reset_process_state():
    # Rate-limit buckets and the OCR cache are per process; start every test clean
    main._buckets.clear()
    cache_clear()
    yield
    main._buckets.clear()
    cache_clear()
