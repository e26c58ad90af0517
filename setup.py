from setuptools import find_packages, setup

# Physical structure under packages/ matches the import path
packages = find_packages(where="packages", include=["ssgcache", "ssgcache.*"])

setup(
    name="ssg-cache",
    version="0.1.0",
    description="Build-time memoizing cache for static-site generation pipelines",
    python_requires=">=3.11",
    packages=packages,
    package_dir={"": "packages"},
    install_requires=[
        "aiofiles>=23.1",
        "filelock>=3.10",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "ssg-cache=ssgcache.cli.main:main",
        ],
    },
)
