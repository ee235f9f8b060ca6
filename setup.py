from setuptools import setup, find_packages

setup(
    name="relaygraph",
    version="0.1.0",
    packages=find_packages("src", exclude=["tests", "tests.*"]),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2",
        "mirascope>=1.0,<2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    python_requires=">=3.9",
    description="async state-graph execution engine for LLM workflows",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
)
