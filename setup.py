from setuptools import setup, find_packages

setup(
    name="reconcile_engine",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    description="Duplicate detection, categorization and account matching for imported transactions",
    python_requires=">=3.8",
)
