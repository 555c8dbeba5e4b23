"""
Setup script for saltbloom.
"""

from setuptools import setup, find_packages

setup(
    name="saltbloom",
    version="0.1.0",
    description="Salted-digest Bloom and Counting Bloom filters",
    packages=find_packages(include=["saltbloom", "saltbloom.*"]),
    package_data={"saltbloom": ["py.typed"]},
    python_requires=">=3.9",
    extras_require={"test": ["pytest"]},
)
