__all__ = [
    'split',
    'mkNonce',
    ]

import calendar
import time

from openid_provider import cryptutil

# The time format of the nonce timestamp: UTC, seconds precision
TIME_FMT = '%Y-%m-%dT%H:%M:%SZ'
TIME_STR_LEN = len('0000-00-00T00:00:00Z')


def split(nonce_string):
    """Extract a timestamp from the given nonce string

    @param nonce_string: the nonce from which to extract the timestamp
    @type nonce_string: str

    @returns: A pair of a Unix timestamp and the salt characters
    @returntype: (int, str)

    @raises ValueError: if the nonce does not start with a correctly
        formatted time string
    """
    timestamp_str = nonce_string[:TIME_STR_LEN]
    timestamp = time.strptime(timestamp_str, TIME_FMT)
    timestamp = calendar.timegm(timestamp)
    return timestamp, nonce_string[TIME_STR_LEN:]


def mkNonce(when=None):
    """Generate a nonce with the current timestamp

    @param when: Unix timestamp representing the issue time of the
        nonce. Defaults to the current time.
    @type when: int

    @returntype: str
    @returns: A string that should be usable as a one-way nonce

    @see: time
    """
    salt = cryptutil.randomToken(16)
    if when is None:
        t = time.gmtime()
    else:
        t = time.gmtime(when)

    time_str = time.strftime(TIME_FMT, t)
    return time_str + salt
