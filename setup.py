"""Setup configuration for Dataflow tips."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="dataflow-tips",
    version="0.1.0",
    author="Dataflow Tips Team",
    description="Troubleshooting agent for Dataflow pipelines built on MCP tool providers and streaming LLMs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["dataflow_tips", "dataflow_tips.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "openai>=1.0.0",
        "anthropic>=0.18.0",
        "jinja2>=3.0.0",
        "jsonschema>=4.0.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "httpx>=0.24.0",
        "python-dotenv>=1.0.0",
        "google-cloud-dataflow-client>=0.8.0",
        "google-cloud-monitoring>=2.15.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dataflow-tips=dataflow_tips.cli:main",
        ],
    },
)
