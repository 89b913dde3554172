# -*- test-case-name: openid_provider.test.test_login -*-
"""Authentication requests and the decisions made about them.

The provider library does not know how users log in. For every
C{checkid_immediate} and C{checkid_setup} request it asks an
application supplied L{LoginHandler} to decide, and turns the
L{Decision} into a response for the relying party:

    - C{Decision.success(response)} becomes a signed positive
      assertion (C{mode=id_res});
    - C{Decision.declined()} becomes C{mode=setup_needed} for immediate
      requests and C{mode=cancel} for setup requests;
    - C{Decision.handled()} means that the handler has taken over the
      exchange with the user agent, e.g. to show a login form, so the
      library sends nothing. It is only allowed for setup requests.

Any other failure is reported by raising L{LoginError}, which is sent
to the relying party as an error response.
"""
import logging

from openid_provider.extensions import parseExtensions, encodeExtensions
from openid_provider.message import OPENID2_NS, ProtocolError
from openid_provider.realm import returnToMatches
from openid_provider.responder import direct, indirect
from openid_provider.store.interface import AssociationStoreError
from openid_provider.store.nonce import mkNonce

__all__ = [
    'LoginRequest',
    'LoginResponse',
    'LoginHandler',
    'LoginError',
    'Decision',
    'login',
]

IMMEDIATE = 'checkid_immediate'
SETUP = 'checkid_setup'


class LoginError(Exception):
    '''
    Raised by login handlers when a decision could not be made.
    '''


class LoginRequest(object):
    """A request to authenticate the user, as received from the relying
    party. Instances are read-only.

    @ivar claimed_id: The claimed identifier, may be empty
    @ivar identity: The OP-local identifier, may be empty
    @ivar return_to: Where the relying party wants the response sent
    @ivar realm: The URL pattern the relying party identifies with
    @ivar extensions: list of L{Extension<openid_provider.extensions.Extension>}
    @ivar mode: C{'checkid_immediate'} or C{'checkid_setup'}
    @ivar assoc_handle: The association handle the relying party asked
        to be used, may be empty
    @ivar context: Whatever the application passed along with the
        request, typically its own HTTP request object
    """

    _fields = ('claimed_id', 'identity', 'return_to', 'realm', 'extensions',
               'mode', 'assoc_handle', 'context')

    def __init__(self, claimed_id='', identity='', return_to='', realm='',
                 extensions=(), mode=SETUP, assoc_handle='', context=None):
        values = dict(
            claimed_id=claimed_id, identity=identity, return_to=return_to,
            realm=realm, extensions=tuple(extensions), mode=mode,
            assoc_handle=assoc_handle, context=context,
        )
        for name in self._fields:
            object.__setattr__(self, name, values[name])

    def __setattr__(self, name, value):
        raise AttributeError('%s is read-only' % self.__class__.__name__)

    @classmethod
    def fromParams(cls, params, context=None):
        """Build a request from a parameter map.

        @raises ExtensionError: if the extension declarations are malformed
        """
        return cls(
            claimed_id=params.get('claimed_id', ''),
            identity=params.get('identity', ''),
            return_to=params.get('return_to', ''),
            realm=params.get('realm', ''),
            extensions=parseExtensions(params),
            mode=params.get('mode', SETUP),
            assoc_handle=params.get('assoc_handle', ''),
            context=context,
        )

    def immediate(self):
        return self.mode == IMMEDIATE

    def getExtension(self, ns_uri):
        '''
        Return the extension with the given namespace URI or None.
        '''
        for extension in self.extensions:
            if extension.ns_uri == ns_uri:
                return extension
        return None

    def returnToMatchesRealm(self):
        """Check that the return_to URL falls under the realm. A request
        without a realm trusts the return_to URL itself, as OpenID 2.0
        defaults the realm to it.
        """
        if not self.realm:
            return bool(self.return_to)
        return returnToMatches(self.realm, self.return_to)

    def __repr__(self):
        return '<%s %s claimed_id=%r return_to=%r>' % (
            self.__class__.__name__, self.mode, self.claimed_id, self.return_to)


class LoginResponse(object):
    """The assertion a login handler wants to make.

    @ivar claimed_id: The claimed identifier to assert, may be empty
    @ivar identity: The OP-local identifier to assert, may be empty
    @ivar op_endpoint: The provider endpoint URL. If empty, the server's
        configured endpoint is used.
    @ivar extensions: list of L{Extension<openid_provider.extensions.Extension>}
        to send back
    """

    def __init__(self, claimed_id='', identity='', op_endpoint='', extensions=()):
        self.claimed_id = claimed_id
        self.identity = identity
        self.op_endpoint = op_endpoint
        self.extensions = tuple(extensions)


class Decision(object):
    """The outcome of a L{LoginHandler} decision.

    @ivar status: C{'success'}, C{'declined'} or C{'handled'}
    @ivar response: the L{LoginResponse} for C{'success'}, or the
        handler's own L{WebResponse<openid_provider.responder.WebResponse>}
        (possibly C{None}) for C{'handled'}
    """
    SUCCESS = 'success'
    DECLINED = 'declined'
    HANDLED = 'handled'

    def __init__(self, status, response=None):
        self.status = status
        self.response = response

    @classmethod
    def success(cls, response):
        if not isinstance(response, LoginResponse):
            raise TypeError('expected a LoginResponse, got %r' % (response,))
        return cls(cls.SUCCESS, response)

    @classmethod
    def declined(cls):
        return cls(cls.DECLINED)

    @classmethod
    def handled(cls, web_response=None):
        return cls(cls.HANDLED, web_response)

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.status)


class LoginHandler(object):
    '''
    Interface for the application's authentication decisions.
    '''

    def decide(self, allow_interactive, request):
        """Decide whether the user may claim the requested identity.

        @param allow_interactive: Whether the handler may interact with
            the user. It is C{False} for immediate requests, and then
            the handler must answer right away and must not send
            anything to the user agent itself.
        @type allow_interactive: bool

        @param request: the request to decide on
        @type request: L{LoginRequest}

        @rtype: L{Decision}

        @raises LoginError: if no decision could be made
        """
        raise NotImplementedError


def login(signatory, handler, params, context=None, op_endpoint=None):
    """Process a C{checkid_immediate} or C{checkid_setup} request.

    @param signatory: signs the assertion
    @type signatory: L{Signatory<openid_provider.association.Signatory>}

    @param handler: makes the authentication decision
    @type handler: L{LoginHandler}

    @param params: the request parameter map
    @type params: dict

    @param op_endpoint: the provider endpoint URL used when the handler
        doesn't set one

    @returns: the response to send, or C{None} if the handler has
        already responded
    @rtype: L{WebResponse<openid_provider.responder.WebResponse>} or None
    """
    mode = params.get('mode')
    if mode not in (IMMEDIATE, SETUP):
        raise ValueError('login called with unexpected mode %r' % (mode,))

    return_to = params.get('return_to', '')
    try:
        request = LoginRequest.fromParams(params, context)
    except ProtocolError as why:
        logging.info('Bad login request: %s' % why)
        return indirect(return_to).error(why)

    allow_interactive = mode == SETUP
    try:
        decision = handler.decide(allow_interactive, request)
    except LoginError as why:
        logging.exception('Login handler failed on %r' % (request,))
        return indirect(return_to).error(why)

    if decision.status == Decision.DECLINED:
        reply_mode = 'setup_needed' if mode == IMMEDIATE else 'cancel'
        return indirect(return_to).respond({'ns': OPENID2_NS, 'mode': reply_mode})
    elif decision.status == Decision.HANDLED:
        if not allow_interactive:
            raise RuntimeError('login handler took over a %s request' % mode)
        return decision.response
    elif decision.status != Decision.SUCCESS:
        raise ValueError('unknown decision status %r' % (decision.status,))

    return assertion(signatory, request, decision.response, op_endpoint)


def assertion(signatory, request, response, op_endpoint=None):
    """Build the signed C{id_res} response to a login request.

    @type signatory: L{Signatory<openid_provider.association.Signatory>}
    @type request: L{LoginRequest}
    @type response: L{LoginResponse}
    """
    if not request.return_to:
        return direct().error(
            ProtocolError('cannot send id_res message, no return_to parameter'))

    respond = indirect(request.return_to)
    try:
        assoc = signatory.getOrCreate(request.assoc_handle)
    except AssociationStoreError as why:
        logging.exception('Cannot get an association to sign with')
        return respond.error(why)

    signed = ['op_endpoint', 'return_to', 'response_nonce', 'assoc_handle']
    fields = {
        'ns': OPENID2_NS,
        'mode': 'id_res',
        'op_endpoint': response.op_endpoint or op_endpoint or '',
        'return_to': request.return_to,
        'response_nonce': mkNonce(),
        'assoc_handle': assoc.handle,
    }
    if response.claimed_id:
        signed.append('claimed_id')
        fields['claimed_id'] = response.claimed_id
    if response.identity:
        signed.append('identity')
        fields['identity'] = response.identity

    try:
        signed.extend(encodeExtensions(fields, response.extensions))
        fields['sig'] = assoc.sign(signed, fields)
    except ValueError as why:
        logging.exception('Cannot sign response to %r' % (request,))
        return respond.error(why)
    fields['signed'] = ','.join(signed)

    if request.assoc_handle and request.assoc_handle != assoc.handle:
        fields['invalidate_handle'] = request.assoc_handle

    return respond.respond(fields)
