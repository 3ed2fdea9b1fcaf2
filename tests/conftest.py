from tests.utils import config  # noqa: F401  (shared fixture)
