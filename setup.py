"""Setup script for ALwrity Content Studio."""

from setuptools import setup, find_packages

setup(
    name="alwrity-content-studio",
    version="0.1.0",
    description="SEO outline generation, section quality scoring and content versioning",
    author="ALwrity",
    packages=find_packages(include=["alwrity", "alwrity.*"]),
    include_package_data=True,
    install_requires=[
        "sqlalchemy>=2.0.0",
        "click>=8.1.0",
        "rich>=13.6.0",
        "httpx>=0.25.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "openai>=1.3.0",
        "google-genai>=1.0.0",
        "tenacity>=8.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "alwrity=alwrity.cli:main",
        ],
    },
    python_requires=">=3.10",
)
