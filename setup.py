"""
Setup script for RecombScanner.

Installs the ``RecombScanner`` package and the ``recomb-scanner`` command.

Usage:
    pip install -e .            # library + CLI
    pip install -e .[test]      # plus pytest
"""

from setuptools import setup, find_packages

setup(
    name='RecombScanner',
    version='2024.2',
    description='Sliding-window divergence scan of two aligned DNA sequences',
    packages=find_packages(include=['RecombScanner', 'RecombScanner.*']),
    python_requires='>=3.9',
    install_requires=[
        'numpy>=1.21',
        'pandas>=1.3',
        'psutil>=5.8',
        'biopython>=1.79',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'recomb-scanner=RecombScanner.cli:main',
        ],
    },
    zip_safe=False,
)
