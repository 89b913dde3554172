# -*- test-case-name: openid_provider.test.test_server -*-
"""OpenID support for Providers.

OVERVIEW
========

    An OpenID provider must perform three tasks:

        1. Examine the incoming request to determine its nature and
           validity.

        2. Make a decision about how to respond to this request.

        3. Format the response according to the protocol.

    The first and last of these tasks are done by the C{L{Server}}
    object. The decision about authentication requests
    (C{checkid_setup} and C{checkid_immediate}) is a matter of
    application policy: it generally involves making sure the user has
    an account and is logged in, and that the identity is theirs to
    claim. The application makes that decision in an object
    implementing C{L{LoginHandler<openid_provider.login.LoginHandler>}}.


USING THIS LIBRARY
==================

    Create a C{L{Server}} with an association store and a login
    handler::

        server = Server(MemoryStore(), MyLoginHandler(),
                        op_endpoint='https://op.example/openid')

    Then for every request to the provider endpoint, extract the OpenID
    fields from the query or POST body and pass them on::

        params = message.fromPostArgs(query)
        response = server.handleRequest(params, context=http_request)

    The result is a C{L{WebResponse<openid_provider.responder.WebResponse>}}
    to translate into the web framework's response, or C{None} if the
    login handler has already sent its own response.


STORES
======

    Associations live in a store shared by all requests. Several
    processes serving the same provider must share the store, so the
    in-memory C{L{MemoryStore<openid_provider.store.memstore.MemoryStore>}}
    is only suitable for a single process. See
    C{L{openid_provider.store.interface}} for the interface to
    implement for other storage.
"""
import logging

from openid_provider import login
from openid_provider.association import Signatory
from openid_provider.message import OPENID2_NS, ProtocolError
from openid_provider.responder import direct, indirect
from openid_provider.store.interface import AssociationStoreError

__all__ = [
    'Server',
    'UnknownNamespace',
    'UnknownMode',
    'UnsupportedSessionType',
]


class UnknownNamespace(ProtocolError):
    def __init__(self, ns):
        super().__init__('unknown ns %r' % (ns,))
        self.ns = ns


class UnknownMode(ProtocolError):
    def __init__(self, mode):
        super().__init__('unknown mode %r' % (mode,))
        self.mode = mode


class UnsupportedSessionType(ProtocolError):
    """Association sessions are not supported by this provider, so
    every C{associate} request is answered with this error. Relying
    parties fall back to stateless mode on it."""

    def __init__(self, session_type):
        super().__init__('session type %r not supported' % (session_type,))
        self.session_type = session_type

    def errorArgs(self):
        return {'error-code': 'unsupported-type'}


class Server(object):
    """I handle requests for an OpenID provider.

    @ivar signatory: Manages the associations used to sign responses.
    @type signatory: L{Signatory<openid_provider.association.Signatory>}

    @ivar login_handler: Makes authentication decisions.
    @type login_handler: L{LoginHandler<openid_provider.login.LoginHandler>}

    @ivar op_endpoint: The URL of this provider's endpoint, asserted in
        responses unless the login handler sets its own.
    @type op_endpoint: str
    """
    signatoryClass = Signatory

    def __init__(self, store, login_handler, op_endpoint=None):
        """Create a server.

        @param store: The association store, shared by all requests.
        @type store: L{AssociationStore<openid_provider.store.interface.AssociationStore>}

        @param login_handler: Makes authentication decisions.
        @type login_handler: L{LoginHandler<openid_provider.login.LoginHandler>}
        """
        if login_handler is None:
            raise TypeError('Server needs a login handler')
        self.signatory = self.signatoryClass(store)
        self.login_handler = login_handler
        self.op_endpoint = op_endpoint

    def handleRequest(self, params, context=None):
        """Handle an OpenID request.

        @param params: The OpenID fields of the request without the
            C{openid.} prefix.
        @type params: dict

        @param context: Anything the login handler needs to see, passed
            on as L{LoginRequest.context<openid_provider.login.LoginRequest>}.

        @rtype: L{WebResponse<openid_provider.responder.WebResponse>} or None
        """
        ns = params.get('ns')
        if ns != OPENID2_NS:
            logging.info('Request with unknown namespace %r' % (ns,))
            return indirect(params.get('return_to')).error(UnknownNamespace(ns))

        mode = params.get('mode')
        if mode == 'associate':
            try:
                return direct().respond(self.associate(params))
            except ProtocolError as why:
                return direct().error(why)
        elif mode in (login.IMMEDIATE, login.SETUP):
            return login.login(self.signatory, self.login_handler, params,
                               context, self.op_endpoint)
        elif mode == 'check_authentication':
            return self.checkAuthentication(params)
        else:
            logging.info('Request with unknown mode %r' % (mode,))
            return indirect(params.get('return_to')).error(UnknownMode(mode))

    def associate(self, params):
        """Answer an C{associate} request.

        Only stateless associations are made, so every session type is
        refused.

        @raises UnsupportedSessionType: always
        """
        session_type = params.get('session_type', '')
        logging.info('Refusing association with session type %r' % (session_type,))
        raise UnsupportedSessionType(session_type)

    def checkAuthentication(self, params):
        """Answer a C{check_authentication} request from a relying party
        in stateless mode.

        @rtype: L{WebResponse<openid_provider.responder.WebResponse>}
        """
        handle = params.get('assoc_handle', '')
        signed_list = params.get('signed', '').split(',')
        try:
            is_valid = self.signatory.verify(
                handle, params.get('sig', ''), signed_list, params)
        except (AssociationStoreError, ValueError) as why:
            logging.exception('check_authentication failed for %r' % (handle,))
            return direct().error(why)
        logging.info('check_authentication for %r: is_valid=%s' % (handle, is_valid))

        fields = {
            'ns': OPENID2_NS,
            'is_valid': 'true' if is_valid else 'false',
        }
        invalidate_handle = params.get('invalidate_handle')
        # our handles never contain newlines, and KV form can't carry them
        if invalidate_handle and '\n' not in invalidate_handle \
                and self.signatory.getAssociation(invalidate_handle) is None:
            fields['invalidate_handle'] = invalidate_handle
        return direct().respond(fields)
