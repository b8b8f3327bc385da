#!/usr/bin/env python3
"""
Setup script for PhD Hub

Install with:
    pip install -e .

Or with test tooling:
    pip install -e ".[test]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

# API server dependencies
server_requirements = [
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.27.0",
    "sqlalchemy[asyncio]>=2.0.25",
    "asyncpg>=0.29.0",
    "aiosqlite>=0.19.0",
    "pydantic>=2.5.0",
    "pydantic-settings>=2.1.0",
    "python-jose[cryptography]>=3.3.0",
    "httpx>=0.26.0",
    "boto3>=1.34.0",
    "python-dotenv>=1.0.0",
]

# Client view-state dependencies
client_requirements = [
    "httpx>=0.26.0",
]

test_requirements = [
    "pytest>=7.4.0",
    "pytest-asyncio>=0.23.0",
    "httpx>=0.26.0",
    "faker>=22.0.0",
]

setup(
    name="phdhub",
    version="1.0.0",
    description="PhD Hub - community forum, events and research groups for doctoral students",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="PhD Hub Team",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=server_requirements,
    extras_require={
        "client": client_requirements,
        "test": test_requirements,
        "dev": test_requirements + [
            "black>=24.1.0",
            "isort>=5.13.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "phdhub-server=phdhub.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    keywords="forum research-groups fastapi sqlalchemy academic",
)
