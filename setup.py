#!/usr/bin/env python

from setuptools import setup, find_packages

setup(
    name='automigrate',
    version='1.0.0',
    license='UNLICENSED',
    author='KN',
    author_email='',
    description='Additive, idempotent schema migrations driven by declared table schemas',
    long_description='',
    packages=find_packages(exclude=['test']),
    include_package_data=True,
    platforms=['MacOS X', 'Posix'],
    python_requires='>=3.8',
    test_suite='test',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: UNLICENSED',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: POSIX',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3.8',
        'Development Status :: 5 - Production/Stable',
        'Topic :: Database',
        'Topic :: Software Development :: Libraries :: Python Modules'
    ],
    install_requires=[
        'pydantic-settings>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    }
)
