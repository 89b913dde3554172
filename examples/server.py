#!/usr/bin/env python
"""
Simple example for an OpenID provider.

Every user is welcome to claim any identity under this server's
C{/id/} path, e.g. C{http://localhost:8000/id/alice}, after confirming
on a form. Immediate requests are always declined, as they can't show
the form.
"""
import html
import logging
import urllib.parse
from http.server import HTTPServer, BaseHTTPRequestHandler

from openid_provider import login, message
from openid_provider.cryptutil import randomToken
from openid_provider.extensions import Extension
from openid_provider.login import Decision, LoginError, LoginHandler, \
     LoginResponse
from openid_provider.responder import WebResponse, indirect
from openid_provider.server import Server
from openid_provider.store.memstore import MemoryStore

SREG_NS = 'http://openid.net/extensions/sreg/1.1'


class ConfirmingLoginHandler(LoginHandler):
    """
    Asks the user to confirm every setup request on a form. Requests
    waiting for confirmation are kept in memory by a random key.
    """
    def __init__(self, base_url):
        self.base_url = base_url
        self.pending = {}

    def decide(self, allow_interactive, request):
        if not allow_interactive:
            return Decision.declined()
        if not request.returnToMatchesRealm():
            raise LoginError('return_to %r is outside of realm %r' % (
                request.return_to, request.realm))

        key = randomToken(12)
        self.pending[key] = request
        return Decision.handled(WebResponse(
            headers={'Content-Type': 'text/html; charset=UTF-8'},
            body=self.form(key, request)))

    def form(self, key, request):
        return '''<html><body>
<p>Allow <b>%s</b> to confirm your identity?</p>
<form method="POST" action="%s">
<input type="hidden" name="key" value="%s">
<input type="text" name="user" value="%s">
<input type="submit" name="yes" value="Yes">
<input type="submit" name="no" value="No">
</form></body></html>''' % (
            html.escape(request.realm or request.return_to),
            html.escape(urllib.parse.urljoin(self.base_url, 'allow')),
            html.escape(key),
            html.escape(self.userFromURL(request.claimed_id)))

    def userFromURL(self, url):
        prefix = urllib.parse.urljoin(self.base_url, 'id/')
        if url.startswith(prefix):
            return url[len(prefix):]
        return ''

    def confirm(self, server, query):
        """
        Finish a pending request with the user's answer.
        """
        request = self.pending.pop(query.get('key', ''), None)
        if request is None:
            return None
        user = query.get('user', '')
        if 'yes' not in query or not user:
            return indirect(request.return_to).respond(
                {'ns': message.OPENID2_NS, 'mode': 'cancel'})

        identity = urllib.parse.urljoin(self.base_url, 'id/' + urllib.parse.quote(user))
        extensions = []
        if request.getExtension(SREG_NS) is not None:
            extensions.append(Extension(SREG_NS, {'nickname': user}, 'sreg'))
        response = LoginResponse(claimed_id=identity, identity=identity,
                                 extensions=extensions)
        return login.assertion(server.signatory, request, response, server.op_endpoint)


class OpenIDHTTPServer(HTTPServer):
    """
    HTTP server that contains a reference to an OpenID provider and
    knows its base URL.
    """
    def __init__(self, store, *args, **kwargs):
        super(OpenIDHTTPServer, self).__init__(*args, **kwargs)

        if self.server_port != 80:
            self.base_url = 'http://{}:{}/'.format(self.server_name,
                                                   self.server_port)
        else:
            self.base_url = 'http://{}/'.format(self.server_name)

        self.login_handler = ConfirmingLoginHandler(self.base_url)
        self.openid = Server(store, self.login_handler,
                             op_endpoint=urllib.parse.urljoin(self.base_url, 'openid'))


class OpenIDRequestHandler(BaseHTTPRequestHandler):
    """
    Request handler for the provider endpoint and the confirmation form.
    """

    def do_GET(self):
        parsed_uri = urllib.parse.urlsplit(self.path)
        self.dispatch(parsed_uri.path, parsed_uri.query)

    def do_POST(self):
        length = int(self.headers.get('Content-Length', 0))
        body = self.rfile.read(length).decode('utf-8')
        self.dispatch(urllib.parse.urlsplit(self.path).path, body)

    def dispatch(self, path, query_string):
        query = dict(urllib.parse.parse_qsl(query_string, keep_blank_values=True))
        if path == '/openid':
            params = message.fromPostArgs(query)
            response = self.server.openid.handleRequest(params, context=self)
        elif path == '/allow':
            response = self.server.login_handler.confirm(self.server.openid, query)
        elif path.startswith('/id/'):
            response = self.identityPage()
        else:
            response = WebResponse(code=404, body='Not found')

        if response is None:
            response = WebResponse(code=404, body='No such request')
        self.writeResponse(response)

    def identityPage(self):
        """
        The identity page lets relying parties discover the endpoint.
        """
        endpoint = self.server.openid.op_endpoint
        return WebResponse(
            headers={'Content-Type': 'text/html; charset=UTF-8'},
            body='<html><head>'
                 '<link rel="openid2.provider" href="%s">'
                 '</head><body>OpenID identity</body></html>' % html.escape(endpoint))

    def writeResponse(self, response):
        self.send_response(response.code)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.end_headers()
        if response.body:
            self.wfile.write(response.body.encode('utf-8'))


def main(host, port):
    """
    Start the sample server.
    """
    # A provider running several processes needs a shared store here.
    store = MemoryStore()

    addr = (host, port)
    server = OpenIDHTTPServer(store, addr, OpenIDRequestHandler)

    print('Server running at:')
    print(server.base_url)
    server.serve_forever()

if __name__ == '__main__':
    host = 'localhost'
    port = 8000

    import optparse

    parser = optparse.OptionParser('Usage:\n %prog [options]')
    parser.add_option(
        '-p', '--port', dest='port', type='int', default=port,
        help='Port on which to listen for HTTP requests. '
        'Defaults to port %default.')
    parser.add_option(
        '-s', '--host', dest='host', default=host,
        help='Host on which to listen for HTTP requests. '
        'Also used for generating URLs. Defaults to %default.')
    parser.add_option(
        '-v', '--verbose', dest='verbose', default=False,
        action='store_true', help='Log protocol details')

    options, args = parser.parse_args()
    if args:
        parser.error('Expected no arguments. Got %r' % args)

    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)

    main(options.host, options.port)
