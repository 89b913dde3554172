import unittest

from openid_provider.realm import Realm, returnToMatches
from . import support


@support.gentests
class ParseTest(unittest.TestCase):
    data = [
        ('empty', ('', False)),
        ('relative', ('/path', False)),
        ('ftp', ('ftp://example.com/', False)),
        ('fragment', ('http://example.com/#frag', False)),
        ('bad_port', ('http://example.com:port/', False)),
        ('star_inside_host', ('http://ex*ample.com/', False)),
        ('bare_star', ('http://*/', False)),
        ('plain', ('http://example.com/', True)),
        ('https', ('https://example.com/path', True)),
        ('wildcard', ('http://*.example.com/', True)),
        ('port', ('http://example.com:8000/', True)),
        ('no_path', ('http://example.com', True)),
    ]

    def _test(self, realm, valid):
        parsed = Realm.parse(realm)
        if valid:
            self.assertIsNotNone(parsed, realm)
        else:
            self.assertIsNone(parsed, realm)

    def test_fields(self):
        realm = Realm.parse('HTTP://*.Example.COM/path')
        self.assertEqual(realm.proto, 'http')
        self.assertTrue(realm.wildcard)
        self.assertEqual(realm.host, 'example.com')
        self.assertEqual(realm.port, 80)
        self.assertEqual(realm.path, '/path')
        self.assertEqual(repr(realm), "Realm('HTTP://*.Example.COM/path')")


@support.gentests
class MatchTest(unittest.TestCase):
    data = [
        ('exact', ('http://example.com/', 'http://example.com/', True)),
        ('subpath', ('http://example.com/', 'http://example.com/login', True)),
        ('query', ('http://example.com/', 'http://example.com/?x=1', True)),
        ('no_slash', ('http://example.com', 'http://example.com/a/b', True)),
        ('path_prefix', ('http://example.com/foo', 'http://example.com/foo/bar', True)),
        ('path_not_segment', ('http://example.com/foo', 'http://example.com/foobar', False)),
        ('other_path', ('http://example.com/foo/', 'http://example.com/bar', False)),
        ('other_scheme', ('http://example.com/', 'https://example.com/', False)),
        ('other_port', ('http://example.com/', 'http://example.com:8000/', False)),
        ('explicit_default_port', ('http://example.com/', 'http://example.com:80/', True)),
        ('other_host', ('http://example.com/', 'http://www.example.com/', False)),
        ('wildcard_sub', ('http://*.example.com/', 'http://www.example.com/', True)),
        ('wildcard_deep', ('http://*.example.com/', 'http://a.b.example.com/x', True)),
        ('wildcard_base', ('http://*.example.com/', 'http://example.com/', True)),
        ('wildcard_suffix_only', ('http://*.example.com/', 'http://badexample.com/', False)),
        ('case', ('http://example.com/', 'http://EXAMPLE.com/', True)),
        ('fragment', ('http://example.com/', 'http://example.com/#x', False)),
        ('not_url', ('http://example.com/', 'not a url', False)),
        ('bad_realm', ('ftp://example.com/', 'ftp://example.com/', False)),
    ]

    def _test(self, realm, return_to, expected):
        self.assertEqual(returnToMatches(realm, return_to), expected)


if __name__ == '__main__':
    unittest.main()
