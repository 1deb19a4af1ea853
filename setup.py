#!/usr/bin/env python

from setuptools import setup

setup(
    name='casttosvg',
    version='0.1.0',
    license='BSD 3-clause license',
    description='Render asciicast recordings as SVG documents',
    long_description='A Python renderer which turns recordings of terminal '
                     'sessions in asciicast format into still or animated '
                     'SVG documents framed in a terminal window.',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Terminals'
    ],
    python_requires='>=3.6',
    packages=[
        'casttosvg',
        'casttosvg.tests'
    ],
    scripts=['scripts/casttosvg'],
    install_requires=[
        'lxml',
        'pyte',
        'wcwidth',
    ],
    extras_require={
        'dev': [
            'coverage',
            'pylint',
            'twine',
            'wheel',
        ]
    }
)
