"""Setup configuration for the LionDine menu service."""

from setuptools import find_packages, setup

setup(
    name="liondine-menu",
    version="1.0.0",
    description="Daily Columbia dining menus: fetched, structured by an LLM, cached per day",
    author="Lion Dine",
    python_requires=">=3.11",
    packages=find_packages(where="src", include=["liondine*"]),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27.0",
        "pandas>=2.2.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        "pyarrow>=15.0.0",
        "streamlit>=1.31.0",
        "beautifulsoup4>=4.12.0",
    ],
    entry_points={
        "console_scripts": [
            "liondine=liondine.cli:cli_entry",
        ],
    },
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-mock>=3.12.0",
            "respx>=0.21.0",
        ],
    },
)
