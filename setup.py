import os

from setuptools import find_packages, setup

here = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(here, "README.rst")) as f:
        README = f.read()
    with open(os.path.join(here, "CHANGES.txt")) as f:
        CHANGES = f.read()
except IOError:
    README = CHANGES = ""

testing_extras = [
    "pytest >= 3.1.0",  # >= 3.1.0 so we can use pytest.param
    "coverage",
    "pytest-cov",
    "pytest-xdist",
]

setup(
    name="conneg",
    version="1.0.0",
    description="HTTP Accept header parsing and media type negotiation",
    long_description=README + "\n\n" + CHANGES,
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: WSGI",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
    ],
    keywords="http accept content-negotiation media-type mime",
    license="MIT",
    packages=find_packages("src", exclude=["tests"]),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[],
    zip_safe=True,
    extras_require={"testing": testing_extras},
)
