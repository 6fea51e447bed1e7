"""
hybridrag Setup Script

Install with: pip install -e .
Tests: pip install -e .[test] && pytest
"""

from setuptools import setup, find_packages

setup(
    name='hybridrag',
    version='0.1.0',
    description='Hybrid vector + knowledge-graph retrieval for RAG pipelines',
    packages=find_packages(include=['hybridrag', 'hybridrag.*']),
    package_data={
        'hybridrag.config': ['*.yaml'],
    },
    install_requires=[
        'structlog>=23.2.0',
        'pydantic>=2.5.0',
        'pyyaml>=6.0.1',
        'numpy>=1.26.0',
        'falkordb>=1.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.21.0',
        ],
    },
    python_requires='>=3.11',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
    ],
)
