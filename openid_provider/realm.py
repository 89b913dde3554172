# -*- test-case-name: openid_provider.test.test_realm -*-
"""
Realm (trust root) matching.

A relying party identifies itself to the user with a realm, a URL
pattern that its return_to URL must fall under::

    http://*.example.com/

matches C{http://www.example.com/login} and
C{http://example.com/openid?x=1}, but not
C{https://www.example.com/} or C{http://example.com:8000/}.
"""
import urllib.parse

__all__ = ['Realm', 'returnToMatches']

_protocols = ['http', 'https']
_default_ports = {'http': 80, 'https': 443}


def _parseURL(url):
    '''
    Split an absolute http(s) URL into (scheme, host, port, path).
    Returns None for anything else.
    '''
    try:
        parts = urllib.parse.urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in _protocols or not parts.hostname:
        return None
    if parts.fragment:
        return None
    if port is None:
        port = _default_ports[scheme]
    path = parts.path or '/'
    if parts.query:
        path += '?' + parts.query
    return scheme, parts.hostname.lower(), port, path


class Realm(object):
    """A parsed realm.

    @ivar unparsed: the realm as given
    @ivar wildcard: whether the host matches subdomains too
    """

    def __init__(self, unparsed, proto, wildcard, host, port, path):
        self.unparsed = unparsed
        self.proto = proto
        self.wildcard = wildcard
        self.host = host
        self.port = port
        self.path = path

    @classmethod
    def parse(cls, realm):
        """Parse a realm string.

        @returns: a L{Realm} or C{None} if the string isn't a valid realm
        """
        wildcard = False
        prefixed = realm
        if '://*.' in realm:
            wildcard = True
            prefixed = realm.replace('://*.', '://', 1)
        url_parts = _parseURL(prefixed)
        if url_parts is None:
            return None
        proto, host, port, path = url_parts
        if '*' in host:
            return None
        return cls(realm, proto, wildcard, host, port, path)

    def validateURL(self, url):
        """Check whether a URL falls under this realm.

        @rtype: bool
        """
        url_parts = _parseURL(url)
        if url_parts is None:
            return False

        proto, host, port, path = url_parts
        if proto != self.proto or port != self.port:
            return False

        if self.wildcard:
            if host != self.host and not host.endswith('.' + self.host):
                return False
        elif host != self.host:
            return False

        allowed = self.path.split('?', 1)[0]
        path = path.split('?', 1)[0]
        if path == allowed:
            return True
        if not allowed.endswith('/'):
            allowed += '/'
        return path.startswith(allowed)

    def __repr__(self):
        return 'Realm(%r)' % (self.unparsed,)


def returnToMatches(realm, return_to):
    '''
    Quick check of a return_to URL against a realm string.
    '''
    parsed = Realm.parse(realm)
    return parsed is not None and parsed.validateURL(return_to)
