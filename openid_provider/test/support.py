import urllib.parse
from logging.handlers import BufferingHandler
import logging

from openid_provider import kvform, message
from openid_provider.login import LoginHandler, Decision


class TestHandler(BufferingHandler):
    def __init__(self, messages):
        BufferingHandler.__init__(self, 0)
        self.messages = messages

    def shouldFlush(self):
        return False

    def emit(self, record):
        self.messages.append(record.__dict__)


class OpenIDTestMixin(object):
    def failUnlessOpenIDValueEquals(self, params, key, expected):
        actual = params.get(key)
        error_format = 'Wrong value for openid.%s: expected=%s, actual=%s'
        error_message = error_format % (key, expected, actual)
        self.assertEqual(expected, actual, error_message)

    def failIfOpenIDKeyExists(self, params, key):
        actual = params.get(key)
        error_message = 'openid.%s unexpectedly present: %s' % (key, actual)
        self.assertFalse(key in params, error_message)


class CatchLogs(object):
    def setUp(self):
        self.messages = []
        root_logger = logging.getLogger()
        self.old_log_level = root_logger.getEffectiveLevel()
        root_logger.setLevel(logging.DEBUG)

        self.log_handler = TestHandler(self.messages)
        formatter = logging.Formatter("%(message)s [%(asctime)s - %(name)s - %(levelname)s]")
        self.log_handler.setFormatter(formatter)
        root_logger.addHandler(self.log_handler)

    def tearDown(self):
        root_logger = logging.getLogger()
        root_logger.removeHandler(self.log_handler)
        root_logger.setLevel(self.old_log_level)

    def failUnlessLogMatches(self, *prefixes):
        """
        Check that the log messages contained in self.messages have
        prefixes in *prefixes.  Raise AssertionError if not, or if the
        number of prefixes is different than the number of log
        messages.
        """
        messages = [r['msg'] for r in self.messages]
        assert len(prefixes) == len(messages), \
               "Expected log prefixes %r, got %r" % (prefixes,
                                                     messages)

        for prefix, message in zip(prefixes, messages):
            assert message.startswith(prefix), \
                   "Expected log prefixes %r, got %r" % (prefixes,
                                                         messages)

    def failUnlessLogEmpty(self):
        self.failUnlessLogMatches()


class FixedLoginHandler(LoginHandler):
    '''
    Login handler that gives a preset decision and records the calls.
    A decision may also be an exception instance to raise.
    '''
    def __init__(self, decision):
        self.decision = decision
        self.calls = []

    def decide(self, allow_interactive, request):
        self.calls.append((allow_interactive, request))
        if isinstance(self.decision, Exception):
            raise self.decision
        return self.decision


def declined():
    return FixedLoginHandler(Decision.declined())


def redirectArgs(response):
    '''
    Parameter map of an indirect response, read back from its Location.
    '''
    location = response.headers['Location']
    query = urllib.parse.urlsplit(location).query
    return message.fromPostArgs(dict(urllib.parse.parse_qsl(query, keep_blank_values=True)))


def bodyArgs(response):
    '''
    Parameter map of a direct response, read back from its KV form body.
    '''
    return kvform.kvToDict(response.body)


def gentests(cls):
    '''
    TestCase class decorator for data-driven tests.

    Reads a list of (name, args) pairs from cls.data and generates a separate
    test method named 'test_<name>' for each pair. The test method would call
    the method '_test' defined in a class to perform actual testing, passing it
    the args.
    '''
    for name, args in cls.data:
        def g(*args):
            def test_method(self):
                self._test(*args)
            return test_method
        method = g(*args)
        method.__name__ = 'test_' + name
        setattr(cls, method.__name__, method)
    return cls
