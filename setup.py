"""
translated_select setup.py — Package configuration.
"""

from setuptools import find_packages, setup

setup(
    name="translated-select",
    version="1.0.0",
    description="Translated select attribute — localized reference-value resolution for MetaModels-style data models",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.11",
    install_requires=[
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
)
