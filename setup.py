from setuptools import setup  # pragma: no cover

setup(  # pragma: no cover
    name='keepsync',
    version='1.0.0',
    packages=['keepsync', 'keepsync.oauth', 'keepsync.tests', 'keepsync.tests.fixtures',
              'keepsync.command', 'keepsync.providers'],
    install_requires=['requests', 'requests-oauthlib', 'oauthlib', 'arrow', 'pystrict', 'xxhash'],
    extras_require={'tests': ['pytest']},
    entry_points={'console_scripts': ['keepsync = keepsync.command:main']},
    python_requires='>=3.8',
    url='',
    license='',
    author='Atakama',
    author_email='',
    description='Upload a KeePass database to cloud storage'
)
