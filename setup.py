#!/usr/bin/env python
# -*- coding: utf-8 -*-
import ast
import os
import re

from setuptools import setup, find_packages


with open("README.rst") as file:
    long_description = file.read()

long_description += "\n\n"
with open("HISTORY.rst") as file:
    long_description += file.read()

with open(os.path.join("rolling_restart", "__init__.py")) as f:
    init_contents = f.read()

    def get_var(var_name):
        pattern = re.compile(r"%s\s+=\s+(.*)" % var_name)
        match = pattern.search(init_contents).group(1)
        return str(ast.literal_eval(match))

    version = get_var("__version__")

setup(
    name="cf-rolling-restart",
    version=version,
    packages=find_packages(exclude=["tests", "tests.*"]),
    description="Rolling restart of Cloud Foundry application instances without downtime",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="MIT",
    keywords="cloudfoundry cf rolling restart",
    python_requires=">=3.8",
    install_requires=["Click", "pydantic>=2", "pydantic-settings"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": [
        "rolling-restart = rolling_restart.cli:rolling_restart",
        "cfroll = rolling_restart.cli:cfroll",
    ]},
    classifiers=[
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
    ],
    zip_safe=False,
)
