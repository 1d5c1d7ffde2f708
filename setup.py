#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name='vlbistats',
    version='0.3',
    description='summary statistics for reconstructed VLBI images',
    packages=find_packages(include=['vlbistats', 'vlbistats.*']),
    entry_points={
        'console_scripts': [
            'vlbistats-summary=vlbistats.cli.summarystats:main',
            'vlbistats-matchres=vlbistats.cli.matchres:main',
        ],
    },
    python_requires='>=3.8',
    install_requires=[
        'scipy',
        'pandas',
        'astropy',
        'PyYAML',
        'numpy',
        'single-source',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
        ]
    }
)
