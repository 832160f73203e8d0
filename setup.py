from setuptools import setup, find_packages
import re

# Read version from nencho/__init__.py
with open('nencho/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='nencho',
    version=version,
    packages=find_packages(include=['nencho', 'nencho.*']),
    install_requires=[
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'nencho=nencho.cli.__main__:main',
        ],
    },
    author='Personal',
    description='Year-end withholding record checks for Japanese payroll data.',
    python_requires='>=3.10',
)
