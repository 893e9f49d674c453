from urllib.parse import urlencode

from garden_api.signing import sign_parameters

SECRET = "test-secret"
NOW = 1_700_000_000


def signed_query(params=None, timestamp=NOW, secret=SECRET, **extra):
    """Build a signed query string the way an API client would."""
    signed = sign_parameters(params or {}, secret, timestamp=timestamp)
    signed.update(extra)
    return urlencode(signed)
