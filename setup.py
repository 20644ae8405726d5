from setuptools import setup, find_packages

setup(
    name="livepercentiles",
    version="0.1.0",
    description="Streaming percentile estimation (P² and CKMS) with bounded memory",
    author="adamfilli",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
