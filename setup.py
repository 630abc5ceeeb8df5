""" Installation script for the ezxlate package.
"""

from setuptools import setup, find_packages
import re
import io

__version__ = re.search(
    r'__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
    io.open('ezxlate/core/__init__.py', encoding='utf_8_sig').read()
    ).group(1)


def get_readme_contents():
    with io.open('README.md') as readme_file:
        return readme_file.read()


setup(
    name='ezxlate',
    description='Extraction and update of course texts for translation pipelines, with a remote API client.',
    long_description=get_readme_contents(),
    long_description_content_type='text/markdown',
    version=__version__,
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'ezxlate.service': ['schemas/*.schema.json']
    },
    python_requires='>=3.8, <4',
    entry_points={
        'console_scripts': [
            'ezxlate-cli = ezxlate.core.ezxlate_cli:main'
        ]
    },
    install_requires=[
        'packaging',
        'requests',
        'pika',
        'urllib3>=1.26,<3',
        'portalocker>=1.2.1',
        'jsonschema>=3.1',
        'sqlalchemy>=1.4',
        'alembic>=1.7'
    ],
    extras_require={
        'test': ['pytest']
    },
    classifiers=[
        'Intended Audience :: Developers',
        'Intended Audience :: Education',
        'Operating System :: POSIX',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: Microsoft :: Windows',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12'
    ]
)
