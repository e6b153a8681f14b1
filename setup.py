#!/usr/bin/env python
"""
Tyre Depot Analytics Setup
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="tyre-depot-analytics",
    version="1.0.0",
    description="Sales analytics and intelligence API for a tyre store admin dashboard",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["tyre_analytics", "tyre_analytics.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
        "Topic :: Database",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-asyncio>=0.24.0",
            "httpx>=0.26.0",
            "aiosqlite>=0.19.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tyre-analytics-api=tyre_analytics.main:run",
            "tyre-analytics-seed=tyre_analytics.ingestion.seed_db:cli",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords=[
        "analytics",
        "fastapi",
        "forecasting",
        "rfm",
        "inventory",
        "postgresql",
        "redis",
    ],
)
