from setuptools import setup, find_packages

setup(
    name="capdiscover-runtime",
    version="0.1.0",
    packages=find_packages(exclude=["capdiscover.tests", "capdiscover.tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "packaging>=21.0",
        "click>=8.0.0",
        "fastapi>=0.95.0",
        "uvicorn>=0.21.0",
        "pydantic>=2.0",
        "httpx>=0.24.1",
    ],
    extras_require={
        "dev": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "capdiscover=capdiscover.cli.discover:main",
        ]
    },
)
