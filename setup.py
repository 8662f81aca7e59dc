from setuptools import setup, find_packages

# defines __version__
exec(open("minihttp/_version.py").read())

setup(
    name="minihttp",
    version=__version__,
    description=
        "A minimal, blocking HTTP/1.1 client with TLS and CONNECT proxy support",
    long_description=open("README.rst").read(),
    license="MIT",
    packages=find_packages(exclude=["minihttp.tests"]),
    python_requires=">=3.8",
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: System :: Networking",
    ],
)
