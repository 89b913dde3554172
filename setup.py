from setuptools import setup, find_packages
from codecs import open

setup(
    name='sm-openid-provider',
    version='0.1.0',
    description='OpenID provider. Supports version 2 of the OpenID protocol in stateless mode.',
    long_description=open('README.md', encoding='utf-8').read(),
    url='https://github.com/isagalaev/sm-openid-provider',
    author='Ivan Sagalaev',
    author_email='maniac@softwaremaniacs.org',
    license='Apache',
    keywords='openid provider server',

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
    ],

    install_requires=['cryptography'],
    packages=find_packages(exclude=['examples', 'openid_provider.test']),
    test_suite='openid_provider.test.test_suite',
)
