"""Setup configuration for tnb-openshift module."""

import os
from setuptools import setup


def get_install_requires():
    """Get requirements for tnb-openshift module."""
    with open("requirements.txt", "r") as requirements_file:
        res = requirements_file.readlines()
        return [req.split(" ", maxsplit=1)[0].strip() for req in res if req.strip()]


def get_version():
    """Get current version of tnb-openshift module."""
    with open(os.path.join("tnb", "openshift", "__init__.py")) as f:
        content = f.readlines()

    for line in content:
        if line.startswith("__version__ ="):
            # dirty, remove trailing and leading chars
            return line.split(" = ")[1][1:-2]

    raise ValueError("No version identifier found")


def read(fname):
    """Read."""
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()


VERSION = get_version()
setup(
    name="tnb-openshift",
    version=VERSION,
    description="Provisioning of service dependencies for integration tests running against OpenShift",
    long_description=read("README.rst"),
    author="tnb-openshift contributors",
    license="GPLv3+",
    python_requires=">=3.8",
    packages=[
        "tnb.openshift",
        "tnb.openshift.services",
    ],
    package_data={"tnb.openshift": ["py.typed"]},
    entry_points={"console_scripts": ["tnb-openshift=tnb.openshift.cli:cli"]},
    zip_safe=False,
    install_requires=get_install_requires(),
    extras_require={
        "test": [
            "pytest",
            "pytest-timeout",
            "flexmock",
        ],
    },
    long_description_content_type="text/x-rst",
)
