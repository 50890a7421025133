"""
Request signing for the legacy (OAuth1-style) nutrition protocol.
"""

import base64
import hashlib
import hmac
import secrets
from typing import Mapping
from urllib.parse import quote


SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def oauth_encode(value: str) -> str:
    """Percent-encode per RFC 3986, so ``! ' ( ) *`` are escaped too."""
    return quote(str(value), safe="")


def normalized_parameters(params: Mapping[str, str]) -> str:
    """Encode every pair and join them sorted by encoded key."""
    pairs = sorted((oauth_encode(k), oauth_encode(v if v is not None else "")) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in pairs)


def signature_base_string(http_method: str, base_url: str, params: Mapping[str, str]) -> str:
    return "&".join([
        http_method.upper(),
        oauth_encode(base_url),
        oauth_encode(normalized_parameters(params)),
    ])


def sign(http_method: str, base_url: str, params: Mapping[str, str], consumer_secret: str) -> str:
    """Compute the HMAC-SHA1 request signature.

    ``params`` must hold every query parameter that will be sent, protocol
    metadata included, but not ``oauth_signature`` itself. There is no token
    secret in this flow, so the key always ends with a bare ``&``.
    """
    base = signature_base_string(http_method, base_url, params)
    key = f"{oauth_encode(consumer_secret)}&"
    digest = hmac.new(key.encode("utf-8"), base.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_nonce() -> str:
    """128 random bits as 32 hex characters."""
    return secrets.token_hex(16)
