"""
Setup script for krypto-srs.

krypto is a spaced-repetition engine for learning to read Greek. It
schedules three kinds of items:

1. Letters - the 24-letter alphabet
2. Noun endings - first and second declension case endings
3. Verb endings - the λύω paradigm

Noun and verb endings unlock as the earlier stage is mastered.
The 'krypto' command is the terminal front-end.
"""

from setuptools import find_packages, setup

setup(
    name="krypto-srs",
    version="0.1.0",
    description="SM-2 spaced repetition engine for Greek letters and endings",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["krypto", "krypto.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "krypto=krypto.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 greek cli education",
)
