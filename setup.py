from setuptools import setup, find_packages

setup(
    name="elasticsim",
    version="0.1.0",
    description="Discrete event simulation of an elastic job-processing box pool with autoscaling",
    packages=find_packages(include=["elasticsim", "elasticsim.*"]),
    install_requires=[
        "matplotlib",
        "numpy",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
