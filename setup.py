#!/usr/bin/env python3
"""
Setup script for ec600npy.
"""

from setuptools import setup, find_packages

setup(
    name="ec600npy",
    version="0.1.0",
    description="Python library for controlling EC600N cellular modules via AT commands",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pyserial>=3.5",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-timeout>=2.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ec600n-cli=ec600npy.cli:main",
        ],
    },
    keywords=["ec600n", "modem", "cellular", "at-commands", "voice-call"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Communications :: Telephony",
        "Topic :: System :: Hardware :: Hardware Drivers",
        "Operating System :: POSIX :: Linux",
        "License :: OSI Approved :: MIT License",
    ],
)
