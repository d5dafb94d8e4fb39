"""Setup configuration for SPORTSLAKE."""

from setuptools import find_packages, setup

setup(
    name="sportslake",
    version="0.1.0",
    description="Sports statistics data lake — API → S3 → Glue → Athena",
    python_requires=">=3.10",
    packages=find_packages(where="src", include=["sportslake*"]),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        "boto3>=1.34.0",
    ],
    entry_points={
        "console_scripts": [
            "sportslake=sportslake.cli:cli_entry",
        ],
    },
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "respx>=0.21.0",
        ],
    },
)
