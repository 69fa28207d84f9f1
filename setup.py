# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
from setuptools import setup, find_packages

VERSION = (0, 3, 0)
__version__ = '.'.join(map(str, VERSION[0:3]))
__description__ = '''TLS terminating reverse proxy.  Accepts TLS connections using a
    PKCS#12 or PEM server identity and relays decrypted bytes to a plaintext TCP backend.'''
__author__ = 'Abhinav Singh'
__author_email__ = 'mailsforabhinav@gmail.com'
__license__ = 'BSD'

if __name__ == '__main__':
    setup(
        name='tlsproxy',
        version=__version__,
        author=__author__,
        author_email=__author_email__,
        description=__description__,
        long_description=open(
            'README.md', 'r', encoding='utf-8').read().strip(),
        long_description_content_type='text/markdown',
        license=__license__,
        python_requires='>=3.8',
        zip_safe=False,
        packages=find_packages(exclude=['tests', 'tests.*']),
        package_data={'tlsproxy': ['py.typed']},
        install_requires=open('requirements.txt', 'r').read().strip().split(),
        extras_require={
            'testing': open('requirements-testing.txt', 'r').read().strip().split(),
        },
        entry_points={
            'console_scripts': [
                'tlsproxy = tlsproxy:entry_point'
            ]
        },
        classifiers=[
            'Development Status :: 4 - Beta',
            'Environment :: Console',
            'Environment :: No Input/Output (Daemon)',
            'Intended Audience :: Developers',
            'Intended Audience :: System Administrators',
            'License :: OSI Approved :: BSD License',
            'Natural Language :: English',
            'Operating System :: MacOS :: MacOS X',
            'Operating System :: POSIX :: Linux',
            'Operating System :: Microsoft :: Windows',
            'Programming Language :: Python :: 3 :: Only',
            'Programming Language :: Python :: 3',
            'Topic :: Internet :: Proxy Servers',
            'Topic :: Security :: Cryptography',
            'Topic :: System :: Networking',
            'Topic :: Utilities',
            'Typing :: Typed',
        ],
        keywords=(
            'tls, ssl, tls termination, reverse proxy, pkcs12, pfx, pem,'
            'tcp proxy, Python3'
        )
    )
