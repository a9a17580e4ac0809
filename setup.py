"""
Packaging for the spotify_info connector.

Tests live beside the modules as *_test.py. Run them with `pytest src` after
`pip install -e .[test]`.
"""

from setuptools import setup

setup(
    name='spotify-info-connector-py',
    version='0.1.0',
    description='Receives now playing updates from the Spotify client extension over a local WebSocket.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['spotify_info', 'spotify_info.conduit', 'spotify_info.config', 'spotify_info.support'],
    package_data={'spotify_info.config': ['*.cfg']},
    python_requires='>=3.8',
    install_requires=[
        'websockets>=13,<16',
        'configobj>=5.0.6',
    ],
    extras_require={
        'test': [
            'pytest',
            'PyHamcrest',
            'timeout-decorator',
        ],
    },
    zip_safe=False,
)
