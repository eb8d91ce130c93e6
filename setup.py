#!/usr/bin/python
# -*- encoding: utf-8 -*-
import ast
import re

from setuptools import find_packages
from setuptools import setup

## The version number is kept in one place only, ncdav/__init__.py
_version_re = re.compile(r"__version__\s+=\s+(.*)")
with open("ncdav/__init__.py", "rb") as f:
    version = str(
        ast.literal_eval(_version_re.search(f.read().decode("utf-8")).group(1))
    )

if __name__ == "__main__":
    test_packages = [
        "pytest",
        "pytest-coverage",
        "coverage",
    ]

    setup(
        name="ncdav",
        version=version,
        description="WebDAV multistatus decoder and PROPFIND/PROPPATCH encoder for Nextcloud and ownCloud servers",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: Apache Software License",
            "Operating System :: OS Independent",
            "Programming Language :: Python",
            "Programming Language :: Python :: 3",
            "Topic :: Internet :: WWW/HTTP",
            "Topic :: Software Development :: Libraries " ":: Python Modules",
            "Topic :: Text Processing :: Markup :: XML",
        ],
        keywords="webdav propfind multistatus nextcloud owncloud",
        license="Apache-2.0",
        python_requires=">=3.10",
        packages=find_packages(exclude=["tests"]),
        include_package_data=True,
        zip_safe=False,
        install_requires=[
            "lxml",
        ],
        extras_require={
            "test": test_packages,
        },
    )
