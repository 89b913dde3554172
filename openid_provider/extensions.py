# -*- test-case-name: openid_provider.test.test_extensions -*-
"""Extension namespace processing.

Extensions ride alongside the core protocol fields of a message. Each
one is declared with an C{ns.<prefix>} field naming its namespace URI
and carries its own fields as C{<prefix>.<key>}::

    ns.sreg = http://openid.net/extensions/sreg/1.1
    sreg.required = email
    sreg.optional = nickname

Prefixes are local to a message: the provider answers with whatever
prefixes it likes, and only the namespace URIs identify extensions.
"""
from openid_provider.message import ProtocolError

__all__ = [
    'Extension',
    'ExtensionError',
    'RESERVED_PREFIXES',
    'parseExtensions',
    'encodeExtensions',
]

# Field names of the core protocol, which can't be extension prefixes
RESERVED_PREFIXES = frozenset([
    'assoc_handle',
    'assoc_type',
    'claimed_id',
    'contact',
    'delegate',
    'dh_consumer_public',
    'dh_gen',
    'dh_modulus',
    'error',
    'identity',
    'invalidate_handle',
    'mode',
    'ns',
    'op_endpoint',
    'openid',
    'realm',
    'reference',
    'response_nonce',
    'return_to',
    'server',
    'session_type',
    'sig',
    'signed',
    'trust_root',
])

GENERATED_PREFIX = 'ext%d'


class ExtensionError(ProtocolError):
    '''
    Malformed extension namespace declarations.
    '''


class Extension(object):
    """The fields of one extension within a message.

    @ivar ns_uri: The namespace URI identifying the extension
    @ivar prefix: The prefix the fields are sent under. On outgoing
        extensions it is a preference only and may be C{None}.
    @ivar args: dict of extension field name (without prefix) to value
    """

    def __init__(self, ns_uri, args=None, prefix=None):
        self.ns_uri = ns_uri
        self.args = dict(args or {})
        self.prefix = prefix

    def __eq__(self, other):
        return type(self) == type(other) and self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not (self == other)

    def __repr__(self):
        return '<%s %s prefix=%r args=%r>' % (
            self.__class__.__name__, self.ns_uri, self.prefix, self.args)


def _isValidPrefix(prefix):
    return bool(prefix) and '.' not in prefix and prefix not in RESERVED_PREFIXES


def parseExtensions(params):
    """Collect the extensions declared in a message.

    @param params: The parameter map. A sequence of (key, value) pairs
        is accepted too, for transports that let a key repeat.
    @type params: dict or list of (str, str)

    @returns: extensions sorted by prefix
    @rtype: list of L{Extension}

    @raises ExtensionError: if a declaration uses a reserved or
        malformed prefix, or prefixes and namespaces don't map one to
        one.
    """
    if hasattr(params, 'items'):
        pairs = list(params.items())
    else:
        pairs = list(params)

    namespaces = {}
    prefixes = {}
    for key, value in pairs:
        if not key.startswith('ns.'):
            continue
        prefix = key[3:]
        if not _isValidPrefix(prefix):
            raise ExtensionError('namespace prefix %r not allowed' % (prefix,))
        if namespaces.get(prefix, value) != value:
            raise ExtensionError(
                'namespace prefix %r assigned to multiple namespaces' % (prefix,))
        if prefixes.get(value, prefix) != prefix:
            raise ExtensionError(
                'namespace %r assigned to multiple prefixes' % (value,))
        namespaces[prefix] = value
        prefixes[value] = prefix

    extensions = {
        prefix: Extension(ns_uri, prefix=prefix)
        for prefix, ns_uri in namespaces.items()
    }
    for key, value in pairs:
        prefix, sep, name = key.partition('.')
        if not sep or prefix == 'ns':
            continue
        extension = extensions.get(prefix)
        if extension is not None:
            extension.args[name] = value

    return [extensions[prefix] for prefix in sorted(extensions)]


def encodeExtensions(params, extensions):
    """Add extension fields to an outgoing parameter map.

    Each extension keeps its preferred prefix when it is usable and not
    yet taken in this message, otherwise it gets the first free
    generated one (C{ext0}, C{ext1}, ...). Fields are written in key
    order so equal input always gives the same output.

    @param params: the parameter map to update
    @type params: dict

    @param extensions: extensions in the order to emit them
    @type extensions: list of L{Extension}

    @returns: names of the extension fields to sign, in emission order
    @rtype: list of str

    @raises ExtensionError: if two extensions share a namespace
    """
    used = set()
    emitted = set()
    signed = []
    for extension in extensions:
        if extension.ns_uri in emitted:
            raise ExtensionError(
                'namespace %r emitted more than once' % (extension.ns_uri,))
        emitted.add(extension.ns_uri)

        prefix = extension.prefix
        if not prefix or not _isValidPrefix(prefix) or prefix in used:
            prefix = _generatePrefix(used)
        used.add(prefix)

        params['ns.' + prefix] = extension.ns_uri
        for name in sorted(extension.args):
            key = '%s.%s' % (prefix, name)
            params[key] = extension.args[name]
            signed.append(key)
    return signed


def _generatePrefix(used):
    i = 0
    while GENERATED_PREFIX % i in used:
        i += 1
    return GENERATED_PREFIX % i
