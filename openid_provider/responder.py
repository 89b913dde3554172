"""
Encoding of provider responses into HTTP responses.

Responses to direct requests (C{associate}, C{check_authentication})
go into the body of the HTTP response in KV form. Responses to
indirect requests (C{checkid_*}) are delivered by redirecting the user
agent back to the relying party's C{return_to} URL with the fields in
the query string.

@group HTTP Codes: HTTP_OK, HTTP_REDIRECT, HTTP_ERROR
"""
import logging
import urllib.parse

from openid_provider import kvform
from openid_provider.message import OPENID2_NS, ProtocolError, toPostArgs

HTTP_OK = 200
HTTP_REDIRECT = 303
HTTP_ERROR = 400


class WebResponse(object):
    """A response to a web request, independent of any web framework.

    @ivar code: The HTTP status code
    @type code: int

    @ivar headers: Headers to send with the response
    @type headers: dict

    @ivar body: The response body
    @type body: str
    """

    def __init__(self, code=HTTP_OK, headers=None, body=''):
        self.code = code
        self.headers = headers if headers is not None else {}
        self.body = body

    def __repr__(self):
        return '<%s code=%s headers=%r>' % (
            self.__class__.__name__, self.code, self.headers)


def errorFields(error):
    """Build the fields of an error response.

    @param error: the exception being reported
    @type error: Exception

    @rtype: dict
    """
    fields = {
        'ns': OPENID2_NS,
        'mode': 'error',
        # KV form can't carry newlines
        'error': ' '.join(str(error).splitlines()),
    }
    if isinstance(error, ProtocolError):
        fields.update(error.errorArgs())
    return fields


class DirectResponder(object):
    '''
    Writes responses as KV form documents in the response body.
    '''

    def respond(self, params):
        """Encode the fields as the response body. Fields that KV form
        can't carry, such as values with newlines echoed from the
        request, turn the response into an error.
        """
        try:
            body = kvform.dictToKV(params)
        except kvform.KVFormError as why:
            logging.info('Cannot encode direct response: %s' % why)
            return self.error(why)
        return WebResponse(
            code=HTTP_OK,
            headers={'Content-Type': 'text/plain; charset=UTF-8'},
            body=body,
        )

    def error(self, error):
        return WebResponse(
            code=HTTP_ERROR,
            headers={'Content-Type': 'text/plain; charset=UTF-8'},
            body=kvform.dictToKV(errorFields(error)),
        )


class IndirectResponder(DirectResponder):
    '''
    Redirects the user agent to the relying party with the response
    fields added to the query of the return_to URL.
    '''

    def __init__(self, return_to):
        self.return_to = return_to

    def encodeToURL(self, params):
        """Add the response fields to the return_to URL. Query arguments
        already in the URL are kept unless a response field replaces
        them. Arguments are sorted so the result is stable.
        """
        parts = urllib.parse.urlsplit(self.return_to)
        fields = toPostArgs(params)
        query = [
            (k, v) for k, v in urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
            if k not in fields
        ]
        query.extend(fields.items())
        query.sort()
        return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))

    def respond(self, params):
        return WebResponse(
            code=HTTP_REDIRECT,
            headers={'Location': self.encodeToURL(params)},
        )

    def error(self, error):
        return self.respond(errorFields(error))


def direct():
    return DirectResponder()


def indirect(return_to):
    """Return a responder delivering to C{return_to}, or a direct one if
    there is no usable URL to redirect to.

    @type return_to: str or None
    """
    if not return_to:
        return DirectResponder()
    try:
        parts = urllib.parse.urlsplit(return_to)
    except ValueError as why:
        logging.info('Unparsable return_to %r: %s' % (return_to, why))
        return DirectResponder()
    if not parts.scheme or not parts.netloc:
        logging.info('return_to %r is not an absolute URL' % (return_to,))
        return DirectResponder()
    return IndirectResponder(return_to)
