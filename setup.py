from pathlib import Path
from setuptools import setup, find_packages

ROOT_DIR = Path(__file__).parent
README = (ROOT_DIR / "README.md").read_text(encoding="utf-8")

setup(
    name="toolbridge",
    version="0.1.0",
    description="Expose existing application methods as MCP tools over JSON-RPC",
    long_description=README,
    long_description_content_type="text/markdown",
    author="toolbridge",
    license="MIT",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.100",
        "pydantic>=2.0",
        "tenacity>=8.0",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "httpx>=0.24",
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "toolbridge=toolbridge.cli:main",
        ],
    },
)
