"""
Setup script for examsim.

examsim is the selection and session engine behind the economics exam
simulator:

1. Question bank - validated catalog, supplementary packs, templates
2. Selection - seeded, topic-balanced question sets for every exam mode
3. Sessions - timed lifecycle, auto-marking and spaced-repetition review

The 'examsim' command is an operator tool for validating banks and
previewing selections.
"""

from setuptools import find_namespace_packages, setup

setup(
    name="examsim",
    version="1.0.0",
    description="Seeded exam selection, timed sessions and spaced review for an exam simulator",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "examsim=src.cli.examsim:main",
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
    keywords="exam simulation spaced-repetition economics education",
)
