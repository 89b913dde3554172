'''
Constants and conversions for OpenID messages.

Inside the library a message is a flat dictionary mapping field names
to string values with the "openid." transport prefix stripped, e.g.
``{'mode': 'checkid_setup', 'return_to': 'http://rp.example/'}``.
'''

# The OpenID 2.0 namespace URI
OPENID2_NS = 'http://specs.openid.net/auth/2.0'

# Prefix of every OpenID field in query strings and POST bodies
OPENID_PREFIX = 'openid.'


class ProtocolError(ValueError):
    """Exception that indicates that a message violated the
    protocol. It is converted into an error response sent back to
    the relying party."""

    def errorArgs(self):
        '''
        Additional fields describing the error to be added to the
        error response.
        '''
        return {}


def fromPostArgs(args):
    """Extract OpenID fields from a dictionary of query or POST
    arguments, stripping the transport prefix.

    @param args: Query arguments. Values may be strings or lists of
        strings as produced by C{urllib.parse.parse_qs}, in which case
        the first value is used.
    @type args: dict

    @returns: the parameter map
    @rtype: dict
    """
    params = {}
    for key, value in args.items():
        if not key.startswith(OPENID_PREFIX):
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[0]
        params[key[len(OPENID_PREFIX):]] = value
    return params


def toPostArgs(params):
    '''
    Add the transport prefix to every field of a parameter map.
    '''
    return {OPENID_PREFIX + key: value for key, value in params.items()}
