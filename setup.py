# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- REACTIVE ---
    "FletXr",

    # --- STATE & VALIDATION ---
    "pydantic>=2.0.0",

    # --- CONFIG ---
    "python-dotenv>=1.0.0",
    "pyyaml>=6.0.0",

    # --- CONSOLE ---
    "rich>=13.0.0",

    # --- TESTS---
    "pytest-asyncio==1.3.0",
    "pytest"
]

setup(
    name="syncdev-client",
    version="1.0.0",
    description="SyncDev|Client reactive state layer",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=install_requires,
    entry_points={
        "console_scripts": [
            "syncdev-state=syncdev.client.main:main",
        ],
    },
    python_requires=">=3.11",
)
