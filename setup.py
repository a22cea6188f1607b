# Copyright 2012-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Setuptools installer for the MAAS provider."""

from os.path import dirname, join

from setuptools import find_packages, setup


def read(filename):
    """Return the whitespace-stripped content of `filename`."""
    path = join(dirname(__file__), filename)
    with open(path, "r") as fin:
        return fin.read().strip()


setup(
    name="maas-provider",
    version="1.0.0",
    url="https://maas.io/",
    license="AGPLv3",
    description="Declarative management of MAAS RAIDs",
    long_description=read("README.rst"),
    author="MAAS Developers",
    author_email="maas-devel@lists.launchpad.net",
    packages=find_packages(
        where="src",
        exclude=["*.testing", "*.tests", "maastesting", "maastesting.*"],
    ),
    package_dir={"": "src"},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "oauthlib",
        "pydantic>=2",
        "python-json-logger",
        "PyYAML",
        "structlog",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "maas-provider = maasprovider.cli:main",
        ]
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Information Technology",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: GNU Affero General Public License v3",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Systems Administration",
    ],
)
