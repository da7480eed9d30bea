from setuptools import setup, find_packages

setup(
    name="tomlconf",
    version="0.1.0",
    description="Locate, create, load and save a TOML config file in the user's config directory",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click",
        "appdirs",
        "tomli-w",
        "tomli; python_version < '3.11'",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "tomlconf=tomlconf.cli:main",
        ],
    },
)
