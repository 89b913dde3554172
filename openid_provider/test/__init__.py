import unittest


def pyUnitTests():
    """
    Aggregate unit tests from modules and return a suite.
    """
    test_module_names = [
        'kvform',
        'message',
        'nonce',
        'memstore',
        'association',
        'signatory',
        'extensions',
        'realm',
        'responder',
        'login',
        'server',
    ]

    test_modules = [
        __import__('openid_provider.test.test_{}'.format(name), {}, {}, ['unused'])
        for name in test_module_names
        ]

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for m in test_modules:
        suite.addTest(loader.loadTestsFromModule(m))

    return suite


def test_suite():
    """
    Collect all of the tests together in a single suite.
    """
    combined_suite = unittest.TestSuite()
    combined_suite.addTests(pyUnitTests())
    return combined_suite
