from setuptools import setup, find_packages

INSTALL_REQUIRES = [
    "pydantic>=2.0,<3.0.0",
    "sqlalchemy[asyncio]>=2.0",
    "typing-extensions>=4.6.0",
]

EXTRAS_REQUIRE = {
    "mysql": [
        "aiomysql>=0.2.0",
        "pymysql>=1.0",
    ],
    "postgres": [
        "asyncpg>=0.29",
    ],
    "sqlite": [
        "aiosqlite>=0.19",
    ],
    "test": [
        "pytest>=7.4",
        "pytest-asyncio>=0.23",
        "aiosqlite>=0.19",
    ],
}

setup(
    name="partition-bench",
    version="1.0.0",
    description="Seed a book schema with synthetic rows and benchmark partitioned vs. unpartitioned tables.",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.10,<3.14',
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    entry_points={
        "console_scripts": [
            "pb-seed=partition_bench.cli.seed:main",
            "pb-benchmark=partition_bench.cli.benchmark:main",
            "pb-compare=partition_bench.cli.compare:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
