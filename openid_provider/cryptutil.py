"""Cryptographic-quality randomness, HMAC and comparison helpers used by
associations and nonces.
"""
import base64
import os

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.constant_time import bytes_eq
from cryptography.hazmat.primitives.hmac import HMAC

__all__ = [
    'getBytes',
    'randomToken',
    'hmacSha1',
    'hmacSha256',
    'constEq',
]


def getBytes(n):
    '''
    Return n random bytes from the operating system's secure source.
    '''
    return os.urandom(n)


def randomToken(n=16):
    '''
    Random printable token: n random bytes in Ascii85. Every character
    is printable non-space ASCII, which keeps tokens valid in KV form
    and in nonces.
    '''
    return base64.a85encode(getBytes(n)).decode('ascii')


def _hmac(algorithm, key, text):
    h = HMAC(key, algorithm, backend=default_backend())
    h.update(text)
    return h.finalize()


def hmacSha1(key, text):
    return _hmac(hashes.SHA1(), key, text)


def hmacSha256(key, text):
    return _hmac(hashes.SHA256(), key, text)


def constEq(a, b):
    """Compare two strings without leaking the position of the first
    difference through timing.

    @type a: str or bytes
    @type b: str or bytes
    @rtype: bool
    """
    if isinstance(a, str):
        a = a.encode('utf-8')
    if isinstance(b, str):
        b = b.encode('utf-8')
    return bytes_eq(a, b)
