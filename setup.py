from setuptools import setup, find_packages

setup(
    name="polyselect",
    version="1.0",
    description="PolySelect: polynomial degree selection by cross-validation",
    author="marcu",
    packages=find_packages(exclude=["tests", "scripts"]),
    install_requires=["numpy", "polars", "tqdm", "joblib"],
)
